"""
Adapters — network, archive, system and terminal collaborators.
"""

from jlinstall.adapters.archive import TarCommandExtractor, TarfileExtractor
from jlinstall.adapters.base import Adapter, Extractor, Fetcher
from jlinstall.adapters.http import CurlFetcher, UrllibFetcher
from jlinstall.adapters.mock import MockExtractor, MockFetcher
from jlinstall.adapters.prompt import Prompter

__all__ = [
    "Adapter",
    "CurlFetcher",
    "Extractor",
    "Fetcher",
    "MockExtractor",
    "MockFetcher",
    "Prompter",
    "TarCommandExtractor",
    "TarfileExtractor",
    "UrllibFetcher",
]
