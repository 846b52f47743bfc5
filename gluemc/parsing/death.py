"""Death message templates built from the game's localization file.

A localization entry such as::

    "death.attack.player.item": "%1$s was slain by %2$s using %3$s",

becomes a :class:`DeathTemplate` of literal anchors around up to three
capturing slots. Templates are matched in file order and the first one that
fits wins.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

from ..logger import logger
from .errors import DeathMessageTemplateExhausted, TemplateSourceEntryMalformed
from .types import DeathEvent, Timestamp

ENTRY_MARKER = '"death.'
VALUE_SEPARATOR = '": "'


class SlotKind(str, Enum):
    VICTIM = "victim"
    ATTACKER = "attacker"
    WEAPON = "weapon"
    EMPTY = "empty"


PLACEHOLDERS = (
    (SlotKind.VICTIM, b"%1$s"),
    (SlotKind.ATTACKER, b"%2$s"),
    (SlotKind.WEAPON, b"%3$s"),
)
PLACEHOLDER_LEN = 4


@dataclass(frozen=True, slots=True)
class DeathTemplate:
    """``prefix slot1 infix1 slot2 infix2 slot3 suffix``.

    Unused trailing slots are ``EMPTY`` with empty literals around them.
    """

    prefix: bytes
    slot1: SlotKind
    infix1: bytes
    slot2: SlotKind
    infix2: bytes
    slot3: SlotKind
    suffix: bytes
    key: str = field(default="", compare=False)

    def components(self) -> tuple[tuple[SlotKind, bytes], ...]:
        """Each slot paired with the literal that follows it."""
        return (
            (self.slot1, self.infix1),
            (self.slot2, self.infix2),
            (self.slot3, self.suffix),
        )


def compile_template(template: str, key: str = "") -> DeathTemplate:
    """Split a localized template into literals and slots.

    Raises:
        TemplateSourceEntryMalformed: If the template has no victim placeholder
    """
    encoded = template.encode("utf-8")

    slots = []
    for kind, token in PLACEHOLDERS:
        position = encoded.find(token)
        if position != -1:
            slots.append((position, kind))
    if not any(kind is SlotKind.VICTIM for _, kind in slots):
        raise TemplateSourceEntryMalformed(template, "missing %1$s placeholder")
    slots.sort()

    literals = []
    cursor = 0
    for position, _ in slots:
        literals.append(encoded[cursor:position])
        cursor = position + PLACEHOLDER_LEN
    literals.append(encoded[cursor:])

    kinds = [kind for _, kind in slots]
    kinds += [SlotKind.EMPTY] * (3 - len(kinds))
    literals += [b""] * (4 - len(literals))

    return DeathTemplate(
        prefix=literals[0],
        slot1=kinds[0],
        infix1=literals[1],
        slot2=kinds[1],
        infix2=literals[2],
        slot3=kinds[2],
        suffix=literals[3],
        key=key,
    )


def parse_template_entry(line: str) -> Optional[DeathTemplate]:
    """Turn one localization file line into a template.

    Returns None for lines that are not death entries.

    Raises:
        TemplateSourceEntryMalformed: If a death entry cannot be compiled
    """
    stripped = line.strip()
    if not stripped.startswith(ENTRY_MARKER):
        return None

    key, sep, rest = stripped[1:].partition(VALUE_SEPARATOR)
    if not sep:
        raise TemplateSourceEntryMalformed(line, "missing value separator")
    close = rest.rfind('"')
    if close == -1:
        raise TemplateSourceEntryMalformed(line, "unterminated value")

    try:
        template = json.loads(f'"{rest[:close]}"')
    except json.JSONDecodeError as e:
        raise TemplateSourceEntryMalformed(line, f"bad string escape ({e.msg})")

    return compile_template(template, key=key)


def build_death_templates(lines: Iterable[str]) -> tuple[DeathTemplate, ...]:
    """Compile every death entry in source order, skipping malformed ones."""
    templates = []
    skipped = 0
    for line in lines:
        try:
            template = parse_template_entry(line)
        except TemplateSourceEntryMalformed as e:
            skipped += 1
            logger.debug(f"Skipping death template entry: {e}")
            continue
        if template is not None:
            templates.append(template)

    logger.info(
        f"Built {len(templates)} death message templates ({skipped} skipped)"
    )
    return tuple(templates)


def match_template(
    template: DeathTemplate, line: bytes, start: int, end: int
) -> Optional[dict[SlotKind, tuple[int, int]]]:
    """Match one template against ``line[start:end]``.

    Each slot followed by a literal captures up to the literal's leftmost
    occurrence (at least one byte); a slot with nothing after it takes the
    rest. There is no backtracking: any miss rejects the whole template.

    Returns the captured byte ranges by slot, or None.
    """
    pos = start
    if template.prefix:
        if not line.startswith(template.prefix, pos, end):
            return None
        pos += len(template.prefix)

    captures: dict[SlotKind, tuple[int, int]] = {}
    for kind, literal in template.components():
        if kind is SlotKind.EMPTY:
            if not literal:
                continue
            if not line.startswith(literal, pos, end):
                return None
        elif not literal:
            captures[kind] = (pos, end)
            pos = end
            continue
        else:
            if pos >= end:
                return None
            found = line.find(literal, pos + 1, end)
            if found == -1:
                return None
            captures[kind] = (pos, found)
            pos = found
        pos += len(literal)

    return captures


def match_death(
    templates: Sequence[DeathTemplate],
    line: bytes,
    start: int,
    end: int,
    time: Timestamp,
) -> DeathEvent:
    """Match the payload against the templates in order.

    Raises:
        DeathMessageTemplateExhausted: If no template matches
    """
    view = memoryview(line)
    for index, template in enumerate(templates):
        captures = match_template(template, line, start, end)
        if captures is None:
            continue

        def slot(kind: SlotKind) -> memoryview:
            lo, hi = captures.get(kind, (start, start))
            return view[lo:hi]

        logger.debug(f"Death message matched template {index} ({template.key})")
        return DeathEvent(
            time=time,
            victim=slot(SlotKind.VICTIM),
            attacker=slot(SlotKind.ATTACKER),
            weapon=slot(SlotKind.WEAPON),
        )

    raise DeathMessageTemplateExhausted(len(templates))
