"""Tests for zone resolution."""

from home_places import Zone
from home_places.modules.places import resolve

HOME = Zone(name="Home", latitude=52.5200, longitude=13.4050, radius=100)
OFFICE = Zone(name="Office", latitude=52.5300, longitude=13.3800, radius=500)
CAFE = Zone(name="Cafe", latitude=52.5302, longitude=13.3802, radius=500)
GYM = Zone(name="Gym", latitude=52.5000, longitude=13.3000, radius=200)

AT_HOME = (52.5200, 13.4050)
NEAR_HOME = (52.5204, 13.4050)  # ~45 m north
AT_OFFICE = (52.5301, 13.3801)
AT_GYM = (52.5001, 13.3001)
NOWHERE = (48.1370, 11.5750)


class TestHome:
    def test_inside_home(self):
        result = resolve(AT_HOME, HOME, [OFFICE])

        assert result.at_home is True
        assert result.name == "Home"
        assert result.home_distance == 0

    def test_near_home_reports_distance(self):
        result = resolve(NEAR_HOME, HOME, [])

        assert result.at_home is True
        assert 40 <= result.home_distance <= 50

    def test_custom_home_label(self):
        home = Zone(name="Casa", latitude=HOME.latitude, longitude=HOME.longitude, radius=100)

        assert resolve(AT_HOME, home, []).name == "Casa"

    def test_home_wins_over_overlapping_place(self):
        place = Zone(name="Neighbourhood", latitude=52.52, longitude=13.405, radius=5000)

        result = resolve(AT_HOME, HOME, [place])

        assert result.at_home is True
        assert result.name == "Home"


class TestPlaces:
    def test_single_place(self):
        result = resolve(AT_GYM, HOME, [OFFICE, GYM])

        assert result.at_home is False
        assert result.name == "Gym"
        assert result.home_distance > 100

    def test_first_matching_place_wins(self):
        assert resolve(AT_OFFICE, HOME, [OFFICE, CAFE]).name == "Office"
        assert resolve(AT_OFFICE, HOME, [CAFE, OFFICE]).name == "Cafe"

    def test_outside_every_zone(self):
        result = resolve(NOWHERE, HOME, [OFFICE, CAFE, GYM])

        assert result.at_home is False
        assert result.name == ""
        assert result.home_distance > 400_000

    def test_without_home_zone(self):
        result = resolve(AT_GYM, None, [GYM])

        assert result.at_home is False
        assert result.home_distance == 0
        assert result.name == "Gym"
