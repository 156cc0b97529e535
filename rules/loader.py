"""Loading and lookup of the ordered format list."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from core.config import DEFAULT_CONFIG, ValidatorConfig
from core.dex import Dex, DexCollection
from core.ids import to_id

from .errors import FormatConfigError
from .schema import Format, FormatRecord

LOGGER = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_FORMATS_PATH = DATA_DIR / "formats.json"

CUSTOM_RULES_SEPARATOR = "@@@"


class FormatRegistry:
    """Immutable mapping of format id to :class:`Format`.

    Records are validated in order the way a format list is curated: entries
    that carry only a ``section`` are headers and are skipped, every other
    entry needs a name with alphanumeric characters, a unique id and a mod that
    has a dex.
    """

    def __init__(
        self,
        records: Iterable[Union[FormatRecord, Mapping[str, Any]]],
        dexes: DexCollection,
        *,
        aliases: Optional[Mapping[str, str]] = None,
        config: ValidatorConfig = DEFAULT_CONFIG,
    ) -> None:
        self.config = config
        self._dexes = dexes
        if config.default_mod not in dexes:
            raise FormatConfigError(f"No dex loaded for the default mod '{config.default_mod}'")
        self._formats: Dict[str, Format] = {}
        self._aliases = {to_id(key): value for key, value in (aliases or {}).items()}

        section = ""
        for index, raw in enumerate(records):
            record = self._validate_record(index, raw)
            if record.section:
                section = record.section
            if not record.name and record.section:
                continue
            identifier = to_id(record.name)
            if not identifier:
                raise FormatConfigError(
                    f"Format #{index + 1} must have a name with alphanumeric characters, not '{record.name}'"
                )
            if identifier in self._formats:
                raise FormatConfigError(f"Format #{index + 1} has a duplicate ID: '{identifier}'")
            mod = record.mod or config.default_mod
            if mod not in dexes:
                raise FormatConfigError(f"Format \"{record.name}\" requires nonexistent mod: '{mod}'")
            self._formats[identifier] = Format.from_record(record, default_mod=config.default_mod)
            LOGGER.debug("Registered format %s (section=%r, mod=%s)", identifier, section, mod)

        LOGGER.info("Loaded %d formats", len(self._formats))

    @classmethod
    def load_from_json(
        cls,
        path: Union[str, Path],
        dexes: DexCollection,
        *,
        config: ValidatorConfig = DEFAULT_CONFIG,
    ) -> "FormatRegistry":
        """Load a format list saved as ``{"formats": [...], "aliases": {...}}`` or a bare list."""

        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(payload, list):
            return cls(payload, dexes, config=config)
        return cls(payload.get("formats", []), dexes, aliases=payload.get("aliases"), config=config)

    @staticmethod
    def _validate_record(index: int, raw: Union[FormatRecord, Mapping[str, Any]]) -> FormatRecord:
        if isinstance(raw, FormatRecord):
            return raw
        try:
            return FormatRecord.model_validate(raw)
        except ValidationError as exc:
            raise FormatConfigError(f"Format #{index + 1} is malformed: {exc}") from exc

    # ------------------------------------------------------------------ lookup
    def has_format(self, identifier: str) -> bool:
        return identifier in self._formats

    def get_format(self, name: Union[str, Format, None]) -> Format:
        """Look up a format by name, id or alias.

        ``name@@@rule1,rule2`` returns a derived descriptor carrying the
        custom rules; the rules themselves are not checked here.  Unknown
        names yield a descriptor with ``exists`` set to ``False``.
        """

        if isinstance(name, Format):
            return name
        name = (name or "").strip()
        custom_rules: Tuple[str, ...] = ()
        if CUSTOM_RULES_SEPARATOR in name:
            name, custom_string = name.split(CUSTOM_RULES_SEPARATOR, 1)
            custom_rules = tuple(rule.strip() for rule in custom_string.split(",") if rule.strip())

        identifier = to_id(name)
        alias = self._aliases.get(identifier)
        if alias:
            name = alias
            identifier = to_id(alias)
        prefixed = f"{self.config.default_mod}{identifier}"
        if prefixed in self._formats:
            identifier = prefixed

        format = self._formats.get(identifier)
        if format is None:
            return Format.missing(name)
        if custom_rules:
            return format.with_custom_rules(custom_rules)
        return format

    def with_custom_rules(self, format: Format, rules: Sequence[str]) -> Format:
        return format.with_custom_rules(tuple(rules))

    # -------------------------------------------------------------------- dexes
    def dex_for(self, format: Format) -> Dex:
        return self._dexes.get(format.mod) or self.default_dex

    @property
    def default_dex(self) -> Dex:
        return self._dexes[self.config.default_mod]

    @property
    def dexes(self) -> DexCollection:
        return self._dexes

    # ----------------------------------------------------------- mapping API
    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get_format(name).exists

    def __iter__(self) -> Iterator[Format]:
        return iter(list(self._formats.values()))

    def __len__(self) -> int:
        return len(self._formats)


def load_default_formats(dexes: DexCollection, *, config: ValidatorConfig = DEFAULT_CONFIG) -> FormatRegistry:
    """Load the bundled format list."""

    return FormatRegistry.load_from_json(DEFAULT_FORMATS_PATH, dexes, config=config)


__all__ = [
    "CUSTOM_RULES_SEPARATOR",
    "DEFAULT_FORMATS_PATH",
    "FormatRegistry",
    "load_default_formats",
]
