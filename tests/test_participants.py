from simresults_tools.acserver.participants import (
    ConnectRecord,
    ConnectScanner,
    LapRecord,
    ParticipantBuilder,
    SummaryOccurrence,
    find_finish_block,
    scan_connect_records,
)
from simresults_tools.models import FinishStatus

PRIMARY_CONNECT = [
    "NEW PICKUP CONNECTION from  190.64.1.2:52314",
    "VERSION 202",
    "Leonardo Ratafia",
    "REQUESTED CAR: tatuusfa1*",
    "DRIVER ACCEPTED FOR CAR 0",
]

ALTERNATE_CONNECT = [
    "NEW PICKUP CONNECTION from  86.150.33.21:57120",
    "VERSION 203",
    "Looking for available slot by name for GUID 76561198023156518 ks_mazda_mx5_cup",
    "Slot found at index 0",
    "DRIVER ACCEPTED FOR CAR ks_mazda_mx5_cup",
    "DRIVER: Owen Hale [Ma team]",
]


def test_primary_connect_form():
    assert scan_connect_records(PRIMARY_CONNECT) == [
        ConnectRecord(name="Leonardo Ratafia", vehicle="tatuusfa1*"),
    ]


def test_alternate_connect_form():
    assert scan_connect_records(ALTERNATE_CONNECT) == [
        ConnectRecord(
            name="Owen Hale",
            vehicle="ks_mazda_mx5_cup",
            team="Ma team",
            driver_id="76561198023156518",
        ),
    ]


def test_accepted_line_naming_the_driver():
    lines = [
        "NEW PICKUP CONNECTION from  91.64.3.199:60211",
        "VERSION 202",
        "Zimtpatrone",
        "REQUESTED CAR: tatuusfa1*",
        "DRIVER ACCEPTED FOR CAR Zimtpatrone",
        "NEW PICKUP CONNECTION from  190.64.1.2:52314",
        "VERSION 202",
        "Leonardo Ratafia",
        "REQUESTED CAR: tatuusfa1*",
        "DRIVER ACCEPTED FOR CAR Leonardo Ratafia",
    ]
    assert scan_connect_records(lines) == [
        ConnectRecord(name="Zimtpatrone", vehicle="tatuusfa1*"),
        ConnectRecord(name="Leonardo Ratafia", vehicle="tatuusfa1*"),
    ]


def test_accepted_line_supplies_a_missing_car():
    lines = PRIMARY_CONNECT[:3] + ["DRIVER ACCEPTED FOR CAR bmw_m3_gt2"]
    assert scan_connect_records(lines) == [ConnectRecord(name="Leonardo Ratafia", vehicle="bmw_m3_gt2")]


def test_rejected_connect_is_dropped():
    lines = PRIMARY_CONNECT[:4] + ["NO SLOT AVAILABLE"] + ["DRIVER ACCEPTED FOR CAR 0"]
    assert scan_connect_records(lines) == []


def test_incomplete_connect_is_replaced_by_the_next_one():
    lines = PRIMARY_CONNECT[:3] + ALTERNATE_CONNECT
    records = scan_connect_records(lines)
    assert [r.name for r in records] == ["Owen Hale"]


def test_scanner_commits_one_record_per_connect():
    scanner = ConnectScanner()
    results = [scanner.feed(line) for line in PRIMARY_CONNECT + ["Sending first leaderboard to car"]]
    assert [r for r in results if r is not None] == [ConnectRecord(name="Leonardo Ratafia", vehicle="tatuusfa1*")]
    assert results[4] is not None


def _builder():
    return ParticipantBuilder(
        name="Pedro Gomez",
        lap_records=[
            LapRecord(time=98.0, next_block=1),
            LapRecord(time=120.4, next_block=2, kept=False),
            LapRecord(time=97.1, next_block=3),
        ],
        occurrences=[
            SummaryOccurrence(block=0, rank=1, laps=0, total=None),
            SummaryOccurrence(block=1, rank=2, laps=1, total=98.0),
            SummaryOccurrence(block=2, rank=1, laps=2, total=218.4),
            SummaryOccurrence(block=3, rank=3, laps=3, total=315.5),
            SummaryOccurrence(block=4, rank=3, laps=3, total=315.5),
        ],
    )


def test_build_laps_skips_excluded_laps_and_renumbers():
    laps = _builder().build_laps()
    assert [lap.number for lap in laps] == [1, 2]
    assert [lap.time for lap in laps] == [98.0, 97.1]
    assert [lap.elapsed_seconds for lap in laps] == [0.0, 98.0]
    assert laps[0].position is None
    assert laps[1].position == 3
    assert {lap.participant_key for lap in laps} == {"Pedro Gomez"}


def test_rank_in_block():
    builder = _builder()
    assert builder.rank_in_block(1) == 2
    assert builder.rank_in_block(2) == 1
    assert builder.rank_in_block(9) is None


def test_finish_evidence_stops_at_chequered_crossing():
    evidence = _builder().finish_evidence(finish_block=3)
    assert evidence.lap_counts == (0, 1, 2, 3)
    assert evidence.last_total == 315.5
    assert evidence.has_total


def test_finish_evidence_without_finish_block_uses_everything():
    evidence = _builder().finish_evidence(finish_block=None)
    assert evidence.lap_counts == (0, 1, 2, 3, 3)


def test_find_finish_block():
    leader = _builder()
    other = ParticipantBuilder(
        name="Lucas Silva",
        occurrences=[
            SummaryOccurrence(block=2, rank=2, laps=3, total=300.0),
            SummaryOccurrence(block=4, rank=1, laps=4, total=400.0),
        ],
    )
    assert find_finish_block([leader, other]) == 4
    assert find_finish_block([]) is None
    assert find_finish_block([ParticipantBuilder(name="x")]) is None


def test_build_participant_uses_connect_details():
    builder = _builder()
    builder.connect = ConnectRecord(name="Pedro Gomez", vehicle="lotus_exos_125*", team="Ma team", driver_id="765")
    builder.grid_position = 2
    participant = builder.build(position=1, finish_status=FinishStatus.NORMAL, total_time=315.5)
    assert participant.key == "Pedro Gomez"
    assert participant.vehicle.name == "lotus_exos_125*"
    assert participant.driver.driver_id == "765"
    assert participant.driver.team == "Ma team"
    assert participant.team == "Ma team"
    assert participant.grid_position == 2
    assert participant.number_of_laps == 2


def test_build_participant_without_connect():
    participant = ParticipantBuilder(name="Gerardo Primo").build(
        position=6, finish_status=FinishStatus.DNF, total_time=0.0
    )
    assert participant.vehicle is None
    assert participant.driver.team is None
    assert participant.team == ""
    assert participant.laps == ()
