"""Screenplay text conventions used for signal extraction"""

import re
from typing import List, Optional, Pattern
from dataclasses import dataclass


@dataclass
class ScriptScene:
    """A slice of script text under one scene heading"""
    scene_number: int
    heading: str
    content: str


class ScriptFormat:
    """Recognizes scene headings, act markers and character cues in raw script text

    Everything that depends on how a script is formatted lives here, so the
    classifier and eligibility rules never see a regex. Subclass and override
    the patterns to support other heading styles.
    """

    def __init__(self):
        self.scene_heading_pattern = re.compile(
            r'^(?:INT\.|EXT\.|INT/EXT\.|I/E\.)[ \t]+.*$', re.MULTILINE
        )
        self.act_break_pattern = re.compile(
            r'\bACT\s+(?:II|III|IV|TWO|THREE|FOUR|2|3|4)\b', re.IGNORECASE
        )

    def split_scenes(self, text: str) -> List[ScriptScene]:
        """Split script text into scenes

        Text before the first heading belongs to no scene. When the text has
        no headings at all it is treated as a single scene numbered 1.
        """
        matches = list(self.scene_heading_pattern.finditer(text))
        if not matches:
            return [ScriptScene(scene_number=1, heading="", content=text)]

        scenes = []
        for idx, match in enumerate(matches):
            end = matches[idx + 1].start() if idx + 1 < len(matches) else len(text)
            scenes.append(ScriptScene(
                scene_number=idx + 1,
                heading=match.group(0).strip(),
                content=text[match.end():end]
            ))
        return scenes

    def count_scene_headings(self, text: str) -> int:
        return len(self.scene_heading_pattern.findall(text))

    def count_scenes_since_last_act_break(self, text: str) -> Optional[int]:
        """Count scene headings after the last act marker

        Returns:
            Heading count after the last marker, or None if the text has no act marker
        """
        last_marker = None
        for last_marker in self.act_break_pattern.finditer(text):
            pass
        if last_marker is None:
            return None
        return self.count_scene_headings(text[last_marker.start():])

    # Character cues. All comparisons are case-insensitive against the registered name.

    def _dialogue_header(self, name: str) -> Pattern:
        return re.compile(
            rf'^[ \t]*{re.escape(name)}[ \t]*(?:\(.*?\))?[ \t]*\r?$',
            re.MULTILINE | re.IGNORECASE
        )

    def _formal_introduction(self, name: str) -> Pattern:
        return re.compile(
            rf'(?:^|[.\n]\s*){re.escape(name)}\s*(?:\([^)]+\))?,\s*',
            re.MULTILINE | re.IGNORECASE
        )

    def _mention(self, name: str) -> Pattern:
        return re.compile(rf'\b{re.escape(name)}\b', re.IGNORECASE)

    def dialogue_header_count(self, text: str, name: str) -> int:
        """Number of lines holding only the character's name (plus optional parenthetical)"""
        return len(self._dialogue_header(name).findall(text))

    def has_formal_introduction(self, text: str, name: str) -> bool:
        """Whether the name is followed by a comma and description, e.g. 'MAYA (30s), wiry'"""
        return self._formal_introduction(name).search(text) is not None

    def mentions(self, text: str, name: str) -> bool:
        return self._mention(name).search(text) is not None


DEFAULT_SCRIPT_FORMAT = ScriptFormat()
