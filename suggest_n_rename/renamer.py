#!/usr/bin/env python3
"""
Safe rename utilities.
"""

# Standard Library
import os
from pathlib import Path

#============================================


def _check_plain_name(name: str) -> None:
	if not name or name in {".", ".."} or os.path.basename(name) != name:
		raise ValueError(f"Not a plain filename: {name!r}")


#============================================


def move_or_rename(base_dir: Path, old_name: str, new_name: str) -> Path:
	"""
	Rename a file inside one directory without overwriting anything.

	Args:
		base_dir: Directory holding the file.
		old_name: Current filename.
		new_name: Desired filename.

	Returns:
		Final path of the file.

	Raises:
		FileNotFoundError: Source is missing.
		FileExistsError: Target already exists.
		OSError: Any other filesystem failure.
	"""
	_check_plain_name(old_name)
	_check_plain_name(new_name)
	source = base_dir / old_name
	target = base_dir / new_name
	if not source.is_file():
		raise FileNotFoundError(f"No such file: '{source}'")
	if source == target:
		return target
	# a case-only change on a case-insensitive volume resolves to the same file
	same_file = target.exists() and os.path.samefile(source, target)
	if same_file:
		source.rename(target)
		return target
	# link fails atomically when the target appeared after the check above
	try:
		os.link(source, target)
	except FileExistsError:
		raise FileExistsError(f"Target already exists: '{target}'") from None
	except OSError:
		# hard links unsupported on this volume
		if target.exists():
			raise FileExistsError(f"Target already exists: '{target}'") from None
		source.rename(target)
		return target
	source.unlink()
	return target
