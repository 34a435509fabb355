"""Shared fixtures"""

import pytest

from scenegate.models import CharacterInfo


# Maya is introduced in scene 1 and carries dialogue in scenes 1-2;
# Jonas speaks once in scene 2 and is mentioned in scene 3.
TWO_HANDER_SCRIPT = """FADE IN:

INT. KITCHEN - DAY

MAYA (30s), wiry and sleepless, burns the toast.

MAYA
Again?

EXT. STREET - NIGHT

MAYA walks fast. JONAS follows.

JONAS
Wait.

MAYA
No.

INT. BAR - NIGHT

JONAS drinks alone.
"""


def make_script(scene_count: int) -> str:
    """Script with the given number of plain scene headings"""
    return "\n".join(
        f"INT. ROOM {n} - DAY\n\nSomething happens.\n" for n in range(1, scene_count + 1)
    )


@pytest.fixture
def two_hander_script():
    return TWO_HANDER_SCRIPT


@pytest.fixture
def roster():
    return [
        CharacterInfo(id="maya", name="Maya"),
        CharacterInfo(id="jonas", name="Jonas"),
    ]


@pytest.fixture
def script_of():
    return make_script
