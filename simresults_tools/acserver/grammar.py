"""Line grammar of the Assetto Corsa dedicated server (acServer) text log.

Every pattern matches a single line with surrounding whitespace already
stripped. Keep them anchored: the log interleaves plugin output, UDP noise
and chat, so a loose pattern would swallow unrelated lines.
"""
from __future__ import annotations

import re

from ..models import SessionType

GAME_NAME = "Assetto Corsa"

BANNER_RX = re.compile(r"Assetto Corsa Dedicated Server", re.IGNORECASE)

# Go's time.Time.String(): 2014-08-31 16:50:59.575808 -0300 UYT [m=+0.001]
DATE_RX = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}(?:\.\d+)?(?: [+-]\d{4})?(?: [A-Za-z0-9+\-]{1,6})?)"
    r"(?: m=[+-]\d+(?:\.\d+)?)?$"
)
SERVER_NAME_RX = re.compile(r"^SERVER NAME:\s*(?P<name>.+)$")
TRACK_RX = re.compile(r"^TRACK=(?P<venue>.*)$")
TRACK_CONFIG_RX = re.compile(r"^CONFIG_TRACK=(?P<course>.*)$")

# Allowed car list: "CARS:" then one car slug per line.
CARS_HEADER_RX = re.compile(r"^CARS:\s*$")
CAR_ENTRY_RX = re.compile(r"^[a-z0-9_][a-z0-9_.\-]*\*?$")

# Session header block.
SESSION_START_RX = re.compile(r"^NextSession$")
SESSION_NAME_RX = re.compile(r"^SESSION:\s*(?P<name>.*)$")
SESSION_TYPE_RX = re.compile(r"^TYPE=(?P<type>.*)$")
SESSION_TIME_RX = re.compile(r"(?:^|\s)TIME=(?P<minutes>\S*)")
SESSION_LAPS_RX = re.compile(r"(?:^|\s)LAPS=(?P<laps>\S*)")

SESSION_TYPES = {
    "practice": SessionType.PRACTICE,
    "1": SessionType.PRACTICE,
    "qualify": SessionType.QUALIFY,
    "qualifying": SessionType.QUALIFY,
    "2": SessionType.QUALIFY,
    "race": SessionType.RACE,
    "3": SessionType.RACE,
    "warmup": SessionType.WARMUP,
    "warm up": SessionType.WARMUP,
}

# Connect records. Primary form:
#     NEW PICKUP CONNECTION from  190.64.1.2:52314
#     VERSION 202
#     Leonardo Ratafia
#     REQUESTED CAR: tatuusfa1*
#     DRIVER ACCEPTED FOR CAR 0
# Some builds print the driver name instead of the slot:
#     DRIVER ACCEPTED FOR CAR Leonardo Ratafia
# Alternate form (newer servers, carries GUID and team):
#     NEW PICKUP CONNECTION from  5.6.7.8:61245
#     VERSION 202
#     Looking for available slot by name for GUID 76561198023156518 abarth500
#     Slot found at index 0
#     DRIVER ACCEPTED FOR CAR abarth500
#     DRIVER: GummiGeschoß [Ma team]
CONNECT_START_RX = re.compile(r"^NEW PICKUP CONNECTION from\b")
CONNECT_VERSION_RX = re.compile(r"^VERSION\s+\d+$")
REQUESTED_CAR_RX = re.compile(r"^REQUESTED CAR:\s*(?P<car>\S+)$")
SLOT_LOOKUP_RX = re.compile(r"^Looking for available slot by name for GUID\s+(?P<guid>\S+)\s+(?P<car>\S+)$")
SLOT_FOUND_RX = re.compile(r"^Slot found at index\b")
DRIVER_ACCEPTED_RX = re.compile(r"^DRIVER ACCEPTED FOR CAR\s*(?P<car>.*)$")
DRIVER_INFO_RX = re.compile(r"^DRIVER:\s*(?P<name>.+?)\s*\[(?P<team>[^\]]*)\]$")
CONNECT_REJECTED_RX = re.compile(r"^(?:NO SLOT AVAILABLE|DRIVER REJECTED)\b")

# LAP Leonardo Ratafia 1:41:900
# LAP Thiago Almeida 1:58:123 [DISCARDED]
LAP_RX = re.compile(
    r"^LAP\s+(?P<name>.+?)\s+(?P<time>\d+:\d{1,2}[:.]\d+)"
    r"(?:\s+\[?(?P<marker>DISCARDED|REFUSED)\]?)?$",
    re.IGNORECASE,
)

# 1) Leonardo Ratafia BEST: 1:41:900 TOTAL: 11:14:296 Laps:6 SesID:3
# 1) Zimtpatrone :] BEST: 7:00:688 TOTAL: 21:20:237 Laps:2 SesID:3
# Angelo Lima BEST: 1:48:483 TOTAL: 46:03:213 Laps:22 SesID:4
SUMMARY_RX = re.compile(
    r"^(?:(?P<rank>\d+)\)\s*)?"
    r"(?P<name>.+?)\s*(?::\])?\s+"
    r"BEST:\s*(?P<best>\S*)\s+"
    r"TOTAL:\s*(?P<total>\S*)\s+"
    r"Laps:\s*(?P<laps>\d+)"
    r"(?:\s+SesID:\s*(?P<sesid>\d+))?$"
)

# CHAT [Leonardo Ratafia]: bien
CHAT_RX = re.compile(r"^CHAT\s+(?P<message>.+)$")
