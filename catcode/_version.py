__version__ = "0.1.0"
__version_tuple__ = (0, 1, 0)

__author__ = "Catcode Developers"
__author_email__ = "catcode-dev@users.noreply.github.com"
