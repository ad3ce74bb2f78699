"""OpenCC-backed Traditional/Simplified Chinese conversion - IScriptNormalizer implementation."""

from opencc import OpenCC

from lyricspot.domain.ports import IScriptNormalizer


class OpenCCScriptNormalizer(IScriptNormalizer):
    """Script conversion via OpenCC ("t2s" / "s2t" profiles).

    Hey future me - OpenCC converters load their dictionaries on construction, which is not
    free. Build ONE instance at startup (lifecycle.py) and share it.
    """

    def __init__(self) -> None:
        self._to_simplified = OpenCC("t2s")
        self._to_traditional = OpenCC("s2t")

    def to_simplified(self, text: str) -> str:
        if not text:
            return text
        return str(self._to_simplified.convert(text))

    def to_traditional(self, text: str) -> str:
        if not text:
            return text
        return str(self._to_traditional.convert(text))
