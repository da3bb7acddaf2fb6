"""
Symbol resolution from vendor filenames.

Vendor files are named after the instrument, sometimes with a descriptive
prefix separated by spaces (``"Nifty 50 NIFTY.txt"``). The resolver takes the
trailing token, strips path and extension punctuation and maps known
long-form names to the engine's tickers. Resolution never fails: unknown
tokens pass through verbatim.
"""

import re
from typing import TYPE_CHECKING, Optional

from ..logging.config import get_logger
from .models import InstrumentId, SecurityType

if TYPE_CHECKING:
    from ..config.defaults import SymbolParams

logger = get_logger(__name__)

DEFAULT_OVERRIDES: dict[str, str] = {"BANKNIFTY": "BNF"}
DEFAULT_EXTENSION = ".txt"

_TOKEN_SPLIT = re.compile(r"[\s/\\]+")
_STRIP_CHARS = "./\\"


class SymbolResolver:
    """Maps vendor filenames to canonical instrument identifiers."""

    def __init__(
        self,
        overrides: Optional[dict[str, str]] = None,
        security_type: SecurityType = SecurityType.EQUITY,
        market: str = "usa",
        extension: str = DEFAULT_EXTENSION,
    ):
        self.overrides = dict(DEFAULT_OVERRIDES if overrides is None else overrides)
        self.security_type = SecurityType(security_type)
        self.market = market
        self.extension = extension

    @classmethod
    def from_config(cls, params: "SymbolParams", extension: str = DEFAULT_EXTENSION) -> "SymbolResolver":
        """Create a resolver from the symbols configuration section."""
        return cls(
            overrides=params.overrides,
            security_type=SecurityType(params.security_type),
            market=params.market,
            extension=extension,
        )

    def extract_token(self, path: str) -> str:
        """
        Extract the raw instrument token from a file path.

        The last non-empty piece after splitting on directory separators and
        whitespace is taken, surrounding dots and slashes are trimmed and the
        extension is removed. If nothing is left the trimmed path is returned
        so the result is never empty for a non-empty path.
        """
        text = str(path)
        pieces = [p for p in _TOKEN_SPLIT.split(text) if p]
        token = pieces[-1] if pieces else text

        token = token.strip(_STRIP_CHARS)
        if self.extension and token.lower().endswith(self.extension.lower()):
            token = token[:-len(self.extension)]
        token = token.strip(_STRIP_CHARS)

        return token or text.strip()

    def resolve(self, path: str) -> InstrumentId:
        """
        Resolve a file path to an InstrumentId.

        Args:
            path: Source file path (str or Path)

        Returns:
            InstrumentId with the overridden ticker, or the literal token
        """
        token = self.extract_token(path)
        symbol = self.overrides.get(token, token)

        if symbol != token:
            logger.debug("Symbol override applied", token=token, symbol=symbol)

        return InstrumentId(
            symbol=symbol,
            security_type=self.security_type,
            market=self.market,
        )


_default_resolver = SymbolResolver()


def resolve_symbol(path: str) -> InstrumentId:
    """Resolve a file path with the default override table."""
    return _default_resolver.resolve(path)
