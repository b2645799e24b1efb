# Keeping this in a dict ensures that values are shared across imports.
from typing import NotRequired, TypedDict


class _StorageDict(TypedDict):
	debug: NotRequired[bool]


storage: _StorageDict = {}
