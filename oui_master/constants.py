"""Global constants for oui-master."""

import re
from typing import Dict, List, Pattern, Tuple

# IEEE registry block types
REGISTRY_MAL = "MA-L"
REGISTRY_MAM = "MA-M"
REGISTRY_MAS = "MA-S"
REGISTRY_IAB = "IAB"
REGISTRY_CID = "CID"

# Provenance tags
SOURCE_IEEE = "IEEE"
SOURCE_WIRESHARK = "Wireshark"
SOURCE_NMAP = "Nmap"

# Hex digit count -> address block width in bits
_KEY_WIDTHS: Dict[int, int] = {6: 24, 7: 28, 9: 36}

UNKNOWN_MANUFACTURER = "Unknown"

# Default file locations
_DEFAULT_SOURCES_DIR = "sources"
_DEFAULT_OUTPUT_DIR = "LISTS"
_DEFAULT_DB_FILE = "master_oui.min.json"

# Output artifacts
_OUT_CSV = "master_oui.csv"
_OUT_JSON = "master_oui.json"
_OUT_JSON_MIN = "master_oui.min.json"
_OUT_TSV = "master_oui.tsv"
_OUT_TXT = "master_oui.txt"
_OUT_XML = "master_oui.xml"
_OUT_SQL = "import-to-d1.sql"
_OUT_SQLITE = "master_oui.db"
_OUT_STATS = "stats.txt"

_CSV_HEADER = "oui,manufacturer,registry,short_name,device_type,registered_date,address,sources"
_TSV_FIELDS: List[str] = [
    "OUI", "Manufacturer", "Registry", "Short_Name", "Registered_Date", "Sources",
]
_SQL_COLUMNS: List[str] = [
    "oui", "manufacturer", "registry", "short_name", "device_type",
    "registered_date", "address", "sources",
]
_SQL_BATCH_SIZE = 500

# Display cap for manufacturer search results
_SEARCH_DISPLAY_LIMIT = 20


def _compile(*patterns: str) -> Tuple[Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


# Device category -> manufacturer patterns.  Order matters: the first
# category with a matching pattern wins.
DEVICE_TYPE_PATTERNS: Tuple[Tuple[str, Tuple[Pattern, ...]], ...] = (
    # Networking equipment
    ("Router", _compile(
        r"cisco", r"juniper", r"mikrotik", r"netgear", r"tp-link", r"tplink",
        r"linksys", r"asus.*router", r"dlink", r"d-link", r"zyxel", r"ubiquiti",
        r"aruba", r"ruckus", r"fortinet", r"fortigate", r"palo alto", r"sonicwall",
        r"watchguard", r"barracuda", r"peplink", r"draytek", r"edgerouter",
    )),
    ("Switch", _compile(
        r"switch", r"arista", r"brocade", r"extreme networks", r"allied telesis",
        r"3com", r"enterasys", r"foundry", r"mellanox",
    )),
    ("Access Point", _compile(
        r"access point", r"wireless.*ap", r"wifi.*ap", r"unifi", r"engenius",
        r"cambium", r"meraki", r"mist", r"aerohive", r"xirrus", r"mojo",
    )),
    # Consumer electronics
    ("Phone", _compile(
        r"apple", r"samsung.*electro", r"huawei", r"xiaomi", r"oppo", r"vivo",
        r"oneplus", r"realme", r"motorola", r"nokia.*mobile", r"sony.*mobile",
        r"lg electronics", r"zte", r"tcl", r"honor", r"google.*pixel", r"fairphone",
    )),
    ("Computer", _compile(
        r"dell", r"hewlett.*packard", r"hp inc", r"lenovo", r"acer", r"asus(?!.*router)",
        r"msi", r"gigabyte", r"intel.*corp", r"amd", r"nvidia", r"microsoft.*corp",
        r"razer", r"alienware", r"thinkpad", r"surface",
    )),
    ("Laptop", _compile(r"laptop", r"notebook", r"chromebook")),
    ("Tablet", _compile(r"tablet", r"ipad", r"galaxy.*tab")),
    ("TV", _compile(
        r"television", r"\btv\b", r"vizio", r"hisense", r"tcl.*electron", r"roku",
        r"lg.*display", r"sharp.*corp", r"philips.*consumer", r"toshiba.*visual",
    )),
    ("Gaming", _compile(
        r"sony.*interactive", r"playstation", r"nintendo", r"xbox", r"valve",
        r"steam", r"corsair", r"logitech.*gaming", r"hyperx", r"steelseries",
    )),
    ("Wearable", _compile(
        r"fitbit", r"garmin", r"polar", r"suunto", r"whoop", r"oura",
        r"smartwatch", r"wearable",
    )),
    # IoT and smart home
    ("IoT", _compile(
        r"espressif", r"raspberry.*pi", r"arduino", r"particle", r"seeed",
        r"adafruit", r"sparkfun", r"nordic.*semi", r"silicon.*labs",
        r"texas.*instruments", r"microchip", r"stmicro", r"nxp", r"qualcomm",
    )),
    ("Smart Home", _compile(
        r"nest", r"ring", r"ecobee", r"hue", r"sonos", r"wemo", r"smartthings",
        r"tuya", r"shelly", r"tasmota", r"home.*assistant", r"z-wave", r"zigbee",
        r"amazon.*devices", r"echo", r"alexa", r"google.*home", r"lifx", r"nanoleaf",
    )),
    ("Camera", _compile(
        r"camera", r"hikvision", r"dahua", r"axis.*comm", r"vivotek", r"uniview",
        r"hanwha", r"bosch.*security", r"flir", r"amcrest", r"reolink", r"wyze",
        r"eufy", r"arlo", r"blink", r"gopro", r"canon", r"nikon", r"sony.*imaging",
    )),
    ("Thermostat", _compile(
        r"thermostat", r"hvac", r"honeywell.*home", r"emerson.*climate", r"carrier",
        r"trane", r"lennox",
    )),
    ("Appliance", _compile(
        r"whirlpool", r"electrolux", r"bosch.*home", r"siemens.*home", r"miele",
        r"lg.*appliance", r"samsung.*home", r"ge.*appliance", r"haier", r"midea",
        r"dyson", r"irobot", r"roomba", r"roborock", r"ecovacs",
    )),
    # Industrial and enterprise
    ("Industrial", _compile(
        r"siemens.*ag", r"rockwell", r"schneider.*electric", r"abb", r"honeywell",
        r"emerson.*electric", r"yokogawa", r"omron", r"fanuc", r"kuka", r"beckhoff",
        r"phoenix.*contact", r"wago", r"advantech", r"moxa",
    )),
    ("Server", _compile(
        r"supermicro", r"hpe.*proliant", r"ibm.*system", r"oracle.*server",
        r"fujitsu.*server", r"inspur", r"huawei.*server", r"quanta",
    )),
    ("Storage", _compile(
        r"netapp", r"emc", r"pure.*storage", r"hitachi.*vantara", r"western.*digital",
        r"seagate", r"synology", r"qnap", r"buffalo", r"drobo",
    )),
    # Communication
    ("VoIP", _compile(
        r"polycom", r"cisco.*phone", r"avaya", r"mitel", r"yealink", r"grandstream",
        r"snom", r"fanvil", r"sangoma", r"alcatel.*lucent", r"genesys",
    )),
    ("Modem", _compile(
        r"modem", r"cable.*modem", r"arris", r"motorola.*cable", r"technicolor",
        r"sagemcom", r"zte.*access", r"huawei.*access",
    )),
    ("Medical", _compile(
        r"medical", r"philips.*healthcare", r"ge.*healthcare", r"siemens.*health",
        r"medtronic", r"baxter", r"abbott", r"draeger", r"hill-rom", r"stryker",
        r"fresenius", r"dexcom", r"masimo",
    )),
    ("Automotive", _compile(
        r"tesla", r"bmw", r"mercedes.*benz", r"volkswagen", r"audi", r"ford.*motor",
        r"general.*motors", r"toyota", r"honda.*motor", r"nissan", r"hyundai.*motor",
        r"continental.*auto", r"bosch.*auto", r"denso", r"harman", r"delphi", r"aptiv",
    )),
    ("Printer", _compile(
        r"printer", r"canon.*print", r"epson", r"brother", r"lexmark", r"xerox",
        r"ricoh", r"kyocera", r"konica.*minolta", r"zebra.*tech",
    )),
    # Audio / video
    ("Audio", _compile(
        r"audio", r"bose", r"harman.*kardon", r"jbl", r"bang.*olufsen", r"sonos",
        r"sennheiser", r"audio-technica", r"shure", r"yamaha.*audio", r"denon",
        r"marantz", r"spotify",
    )),
    ("Media Player", _compile(
        r"amazon.*fire", r"apple.*tv", r"chromecast", r"nvidia.*shield",
        r"roku.*player", r"streaming", r"plex", r"kodi",
    )),
)


def _country(*names: str) -> Pattern:
    alternation = "|".join(names)
    return re.compile(r"\b(" + alternation + r")\s*\d{0,6}\s*$", re.IGNORECASE)


# Trailing "<country> <postal code>" patterns, tried in order
COUNTRY_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r"\b(US|USA)\s*\d{0,5}\s*$", re.IGNORECASE),
    _country("CN", "CHN", "China"),
    _country("TW", "TWN", "Taiwan"),
    _country("KR", "KOR", "Korea"),
    _country("JP", "JPN", "Japan"),
    _country("DE", "DEU", "Germany"),
    _country("GB", "GBR", "UK"),
    _country("FR", "FRA", "France"),
    _country("IT", "ITA", "Italy"),
    _country("NL", "NLD", "Netherlands"),
    _country("SE", "SWE", "Sweden"),
    _country("FI", "FIN", "Finland"),
    _country("IN", "IND", "India"),
    _country("AU", "AUS", "Australia"),
    _country("CA", "CAN", "Canada"),
    _country("IL", "ISR", "Israel"),
    _country("SG", "SGP", "Singapore"),
    _country("HK", "HKG", "Hong Kong"),
    _country("VN", "VNM", "Vietnam"),
    _country("BR", "BRA", "Brazil"),
    _country("MX", "MEX", "Mexico"),
    _country("RU", "RUS", "Russia"),
    _country("PL", "POL", "Poland"),
    _country("CZ", "CZE", "Czech"),
    _country("CH", "CHE", "Switzerland"),
    _country("AT", "AUT", "Austria"),
    _country("BE", "BEL", "Belgium"),
    _country("DK", "DNK", "Denmark"),
    _country("NO", "NOR", "Norway"),
    _country("IE", "IRL", "Ireland"),
    _country("ES", "ESP", "Spain"),
    _country("PT", "PRT", "Portugal"),
    _country("MY", "MYS", "Malaysia"),
    _country("TH", "THA", "Thailand"),
    _country("PH", "PHL", "Philippines"),
    _country("ID", "IDN", "Indonesia"),
    _country("ZA", "ZAF", "South Africa"),
    _country("AE", "ARE", "UAE"),
    _country("SA", "SAU", "Saudi"),
    _country("NZ", "NZL", "New Zealand"),
)

# Fallbacks when no country-specific pattern matches
_COUNTRY_POSTAL_FALLBACK = re.compile(r"\s([A-Z]{2})\s+\d{4,6}\s*$")
_COUNTRY_US_POSTAL = re.compile(r"\bUS\b\s*\d{5}", re.IGNORECASE)
_COUNTRY_CN_POSTAL = re.compile(r"\bCN\b\s*\d{5,6}", re.IGNORECASE)
_COUNTRY_TRAILING_CODE = re.compile(r"\s([A-Z]{2})\s*$")

# Spelled-out and 3-letter forms -> 2-letter code
COUNTRY_ALIASES: Dict[str, str] = {
    "usa": "US", "china": "CN", "chn": "CN", "taiwan": "TW", "twn": "TW",
    "korea": "KR", "kor": "KR", "japan": "JP", "jpn": "JP",
    "germany": "DE", "deu": "DE", "uk": "GB", "gbr": "GB",
    "france": "FR", "fra": "FR", "italy": "IT", "ita": "IT",
    "netherlands": "NL", "nld": "NL", "sweden": "SE", "swe": "SE",
    "finland": "FI", "fin": "FI", "india": "IN", "ind": "IN",
    "australia": "AU", "aus": "AU", "canada": "CA", "can": "CA",
    "israel": "IL", "isr": "IL", "singapore": "SG", "sgp": "SG",
    "hong kong": "HK", "hkg": "HK", "vietnam": "VN", "vnm": "VN",
    "brazil": "BR", "bra": "BR", "mexico": "MX", "mex": "MX",
    "russia": "RU", "rus": "RU", "poland": "PL", "pol": "PL",
    "czech": "CZ", "cze": "CZ", "switzerland": "CH", "che": "CH",
    "austria": "AT", "aut": "AT", "belgium": "BE", "bel": "BE",
    "denmark": "DK", "dnk": "DK", "norway": "NO", "nor": "NO",
    "ireland": "IE", "irl": "IE", "spain": "ES", "esp": "ES",
    "portugal": "PT", "prt": "PT", "malaysia": "MY", "mys": "MY",
    "thailand": "TH", "tha": "TH", "philippines": "PH", "phl": "PH",
    "indonesia": "ID", "idn": "ID", "south africa": "ZA", "zaf": "ZA",
    "uae": "AE", "are": "AE", "saudi": "SA", "sau": "SA",
    "new zealand": "NZ", "nzl": "NZ",
}

_BANNER = r"""
  ___  _   _ ___   __  __         _
 / _ \| | | |_ _| |  \/  |__ _ __| |_ ___ _ _
| (_) | |_| || |  | |\/| / _` (_-<  _/ -_) '_|
 \___/ \___/|___| |_|  |_\__,_/__/\__\___|_|
"""
