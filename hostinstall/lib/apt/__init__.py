from .apt import Apt
from .debconf import set_selections

__all__ = [
	'Apt',
	'set_selections',
]
