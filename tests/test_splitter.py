from simresults_tools.acserver.context import ServerContext, scan_allowed_vehicles
from simresults_tools.acserver.splitter import has_session_evidence, session_fragments, split_fragments

LOG = """Assetto Corsa Dedicated Server v1.0.0
SERVER NAME: First Name
TRACK=monza
CARS:
tatuusfa1
NextSession
SESSION: Practice
TYPE=PRACTICE
TIME=10 LAPS=0
NextSession
SESSION: Qualify
TYPE=QUALIFY
TIME=10 LAPS=0
NEW PICKUP CONNECTION from  1.2.3.4:5000
VERSION 202
Mario Rossi
REQUESTED CAR: tatuusfa1*
DRIVER ACCEPTED FOR CAR 0
LAP Mario Rossi 1:50:000
1) Mario Rossi BEST: 1:50:000 TOTAL: 1:50:000 Laps:1 SesID:0
SERVER NAME: Second Name
NextSession
SESSION: Race
TYPE=RACE
TIME=0 LAPS=2
LAP Mario Rossi 1:49:000
1) Mario Rossi BEST: 1:49:000 TOTAL: 1:49:000 Laps:1 SesID:0
"""


def test_split_fragments_yields_preamble_then_sessions():
    fragments = list(split_fragments(LOG))
    assert [f.is_session for f in fragments] == [False, True, True, True]
    assert [f.first_line for f in fragments] == [1, 6, 10, 22]
    assert fragments[1].lines[0] == "NextSession"
    assert fragments[0].lines[-1] == "tatuusfa1"


def test_split_fragments_without_sessions():
    fragments = list(split_fragments("Assetto Corsa Dedicated Server\nServer started\n"))
    assert len(fragments) == 1
    assert not fragments[0].is_session


def test_split_fragments_handles_windows_line_endings():
    fragments = list(split_fragments(LOG.replace("\n", "\r\n")))
    assert [f.first_line for f in fragments] == [1, 6, 10, 22]
    assert all(not line.endswith("\r") for f in fragments for line in f.lines)


def test_has_session_evidence():
    assert has_session_evidence(("NextSession", "LAP Mario Rossi 1:50:000"))
    assert has_session_evidence(("1) Mario Rossi BEST: 1:50:000 TOTAL: 1:50:000 Laps:1 SesID:0",))
    assert not has_session_evidence(("NextSession", "SESSION: Practice", "TYPE=PRACTICE"))


def test_session_fragments_drop_empty_sessions():
    fragments = list(session_fragments(LOG))
    assert [f.first_line for f in fragments] == [10, 22]


def test_session_fragments_carry_server_context():
    qualify, race = session_fragments(LOG)

    # metadata as it stood when the fragment started
    assert qualify.context.server_name == "First Name"
    assert race.context.server_name == "Second Name"
    assert qualify.context.track_venue == "monza"
    assert race.context.allowed_vehicles == ("tatuusfa1",)

    # connects made inside the fragment are visible to it and to later ones
    assert qualify.context.connections["Mario Rossi"].vehicle == "tatuusfa1*"
    assert "Mario Rossi" in race.context.connections


def test_session_fragments_are_lazy():
    context = ServerContext()
    fragments = session_fragments(LOG, context)
    next(fragments)
    assert context.server_name == "Second Name"
    assert context.track_venue == "monza"


def test_scan_allowed_vehicles_stops_at_first_non_car_line():
    lines = ["CARS:", "bmw_m3_gt2", "bmw_m3_gtr", "bmw_m3_gt2", "", "ks_vallelunga"]
    assert scan_allowed_vehicles(lines) == ["bmw_m3_gt2", "bmw_m3_gtr"]


def test_scan_allowed_vehicles_keeps_last_block():
    lines = ["CARS:", "abarth500", "Server started", "CARS:", "tatuusfa1", "SERVER NAME: x"]
    assert scan_allowed_vehicles(lines) == ["tatuusfa1"]
    assert scan_allowed_vehicles(["TRACK=monza"]) is None
