"""Test helpers: log line builder and a localization excerpt."""

from gluemc.events.base import ParsedLine

# Excerpt of en_us.json in file order, including entries the builder skips
EN_US_EXCERPT = """{
  "deathScreen.title": "You Died!",
  "death.attack.anvil": "%1$s was squashed by a falling anvil",
  "death.attack.arrow": "%1$s was shot by %2$s",
  "death.attack.arrow.item": "%1$s was shot by %2$s using %3$s",
  "death.attack.badRespawnPoint.link": "Intentional Game Design",
  "death.attack.badRespawnPoint.message": "%1$s was killed by %2$s",
  "death.attack.drown": "%1$s drowned",
  "death.attack.drown.player": "%1$s drowned while trying to escape %2$s",
  "death.attack.fireworks.item": "%1$s went off with a bang due to a firework fired from %3$s by %2$s",
  "death.attack.mob.item": "%1$s was slain by %2$s using %3$s",
  "death.attack.mob": "%1$s was slain by %2$s",
  "death.attack.outOfWorld": "%1$s fell out of the world",
  "death.fell.accident.generic": "%1$s fell from a high place",
  "gui.done": "Done"
}"""


def log_line(
    payload: str,
    logger: str = "Server thread",
    level: str = "INFO",
    time: str = "12:34:56",
) -> bytes:
    """Build a raw server log line."""
    return f"[{time}] [{logger}/{level}]: {payload}".encode()


def parsed_line(parser, payload: str, **kwargs):
    """Parse a built log line into the ParsedLine handlers receive."""
    line = log_line(payload, **kwargs)
    event, span = parser.parse_line(line)
    return ParsedLine(line=line, event=event, span=span)
