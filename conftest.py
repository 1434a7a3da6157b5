"""Shared fixtures: a sample roster page and a controllable clock."""

from datetime import datetime, timedelta, timezone

import pytest

# Lineup container holds five players:
#   Horn       - visible sub_child, no arrow           -> none, STARTELF, GESETZT
#   Rotation   - hidden sub_child with arrow           -> none
#   Pfeil      - visible sub_child with arrow          -> none, STARTELF
#   Mueller    - under the "Verletzt" section          -> none, STARTELF, GESETZT (injured)
#   Xavi       - no sub_child at all                   -> none, STARTELF, GESETZT
# Bankspieler sits outside the container and is never considered.
ROSTER_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>FC Beispiel - Aufstellung</title>
  <script>var scouting = ["Geisterspieler"];</script>
</head>
<body>
  <div class="stadium_container_bg">
    <div class="sub_child" style="display: block">
      <div class="player_no">1</div>
      <div class="player_name">Horn</div>
    </div>
    <div class="sub_child" style="display:none">
      <div class="player_no">7<span class="next_sub"></span></div>
      <div class="player_name">Rotation Kandidat</div>
    </div>
    <div class="sub_child" style="color: red; display: BLOCK">
      <div class="player_no">9<span class="next_sub"></span></div>
      <div class="player_name">Pfeil</div>
    </div>
    <section>
      <h3>Verletzt</h3>
      <div class="player_name">Mueller</div>
    </section>
    <div class="player_name">Xavi</div>
  </div>
  <div class="bench">
    <div class="player_name">Bankspieler</div>
  </div>
</body>
</html>
"""

ROSTER_URL = "https://www.example.org/fc-beispiel/42/"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def roster_html():
    return ROSTER_HTML
