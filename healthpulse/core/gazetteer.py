"""
Location gazetteer for Health Pulse.

This module resolves free-text place names to coordinates against
a static, ordered name -> coordinate table. The table order is the
tie-break order for equally long matches.
"""

import csv
import os
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import openpyxl

from healthpulse.common.geo import validate_coordinates
from healthpulse.core.errors import LocationUnresolved
from healthpulse.core.models import Coordinate, NamedLocation
from healthpulse.observability.logging_setup import get_logger

log = get_logger("healthpulse.gazetteer")

# 전치사 뒤 단어를 지명 후보로 사용
PREPOSITIONS = ("in", "to", "at", "near", "around", "from", "visiting")

# 부분 문자열 매칭 최소 길이
MIN_FRAGMENT_LEN = 3

# (지명, 위도, 경도) - 순서가 동일 길이 매칭의 우선순위
SINGAPORE_PLACES: Tuple[Tuple[str, float, float], ...] = (
    # Central
    ("orchard", 1.3048, 103.8318),
    ("orchard road", 1.3048, 103.8318),
    ("marina bay", 1.2810, 103.8598),
    ("marina bay sands", 1.2834, 103.8607),
    ("chinatown", 1.2833, 103.8437),
    ("clarke quay", 1.2888, 103.8467),
    ("little india", 1.3063, 103.8516),
    ("bugis", 1.3000, 103.8558),
    ("raffles place", 1.2845, 103.8507),
    ("city hall", 1.2930, 103.8520),
    ("dhoby ghaut", 1.2987, 103.8453),
    ("somerset", 1.3007, 103.8370),
    ("newton", 1.3135, 103.8388),
    ("novena", 1.3206, 103.8437),
    ("toa payoh", 1.3343, 103.8470),
    ("bishan", 1.3503, 103.8487),
    ("ang mo kio", 1.3690, 103.8454),
    ("thomson", 1.3247, 103.8318),
    ("stevens", 1.3200, 103.8256),
    # North
    ("woodlands", 1.4382, 103.7890),
    ("woodlands north", 1.4480, 103.7890),
    ("yishun", 1.4304, 103.8354),
    ("yishun central", 1.4291, 103.8350),
    ("sembawang", 1.4491, 103.8185),
    ("canberra", 1.4434, 103.8290),
    ("admiralty", 1.4407, 103.8010),
    ("marsiling", 1.4327, 103.7742),
    ("kranji", 1.4250, 103.7617),
    ("sungei kadut", 1.4135, 103.7565),
    ("khatib", 1.4173, 103.8330),
    ("lower seletar", 1.3952, 103.8069),
    # South
    ("sentosa", 1.2494, 103.8303),
    ("sentosa cove", 1.2448, 103.8347),
    ("harbourfront", 1.2659, 103.8223),
    ("tiong bahru", 1.2855, 103.8270),
    ("tanjong pagar", 1.2762, 103.8458),
    ("outram park", 1.2803, 103.8398),
    ("redhill", 1.2896, 103.8176),
    ("queenstown", 1.2941, 103.8059),
    ("alexandra", 1.2738, 103.8018),
    ("kent ridge", 1.2966, 103.7841),
    ("one north", 1.2989, 103.7872),
    ("buona vista", 1.3069, 103.7905),
    ("holland village", 1.3115, 103.7967),
    ("commonwealth", 1.3026, 103.7986),
    # East
    ("changi", 1.3644, 103.9915),
    ("changi airport", 1.3644, 103.9915),
    ("tampines", 1.3496, 103.9568),
    ("tampines east", 1.3563, 103.9610),
    ("tampines west", 1.3455, 103.9426),
    ("pasir ris", 1.3721, 103.9474),
    ("bedok", 1.3236, 103.9273),
    ("bedok north", 1.3298, 103.9188),
    ("bedok reservoir", 1.3360, 103.9338),
    ("katong", 1.3048, 103.9065),
    ("marine parade", 1.3017, 103.9058),
    ("geylang", 1.3133, 103.8785),
    ("aljunied", 1.3164, 103.8818),
    ("paya lebar", 1.3175, 103.8918),
    ("macpherson", 1.3265, 103.8900),
    ("kembangan", 1.3207, 103.9129),
    ("eunos", 1.3197, 103.9037),
    ("simei", 1.3433, 103.9530),
    ("tanah merah", 1.3276, 103.9464),
    ("expo", 1.3347, 103.9622),
    ("eastshore", 1.3157, 103.9253),
    # West
    ("jurong east", 1.3329, 103.7436),
    ("jurong west", 1.3404, 103.7090),
    ("boon lay", 1.3387, 103.7018),
    ("lakeside", 1.3441, 103.7210),
    ("chinese garden", 1.3421, 103.7256),
    ("clementi", 1.3162, 103.7649),
    ("dover", 1.3113, 103.7786),
    ("tuas", 1.2966, 103.6361),
    ("tuas link", 1.3402, 103.6370),
    ("tuas west road", 1.3298, 103.6400),
    ("bukit batok", 1.3590, 103.7637),
    ("bukit gombak", 1.3587, 103.7518),
    ("choa chu kang", 1.3840, 103.7470),
    ("yew tee", 1.3969, 103.7472),
    ("bukit panjang", 1.3774, 103.7719),
    ("cashew", 1.3698, 103.7649),
    ("hillview", 1.3626, 103.7675),
    ("beauty world", 1.3418, 103.7759),
    ("king albert park", 1.3353, 103.7834),
    ("sixth avenue", 1.3306, 103.7965),
    ("tan kah kee", 1.3259, 103.8067),
    ("botanic gardens", 1.3225, 103.8154),
    ("farrer road", 1.3172, 103.8073),
    # North-East
    ("hougang", 1.3613, 103.8862),
    ("hougang central", 1.3712, 103.8937),
    ("kovan", 1.3602, 103.8851),
    ("serangoon", 1.3554, 103.8654),
    ("serangoon north", 1.3778, 103.8742),
    ("nex", 1.3506, 103.8719),
    ("punggol", 1.4043, 103.9021),
    ("punggol east", 1.4062, 103.9067),
    ("sengkang", 1.3916, 103.8946),
    ("sengkang west", 1.3869, 103.8767),
    ("compassvale", 1.3946, 103.9005),
    ("rumbia", 1.3996, 103.9069),
    ("bakau", 1.3916, 103.9059),
    ("kangkar", 1.3836, 103.9015),
    ("ranggung", 1.3875, 103.8976),
    ("cheng lim", 1.3965, 103.8944),
    ("farmway", 1.3975, 103.8906),
    ("kupang", 1.3985, 103.8867),
    ("thanggam", 1.3996, 103.8828),
    ("fernvale", 1.3919, 103.8761),
    ("layar", 1.3839, 103.8721),
    ("tongkang", 1.3759, 103.8681),
)

def _normalize(text: Optional[str]) -> str:
    return " ".join((text or "").strip().lower().split())

class Gazetteer:
    """정렬된 지명 사전"""

    def __init__(self, entries: Iterable[NamedLocation]):
        """
        초기화합니다.

        Args:
            entries: 지명 항목 (순서가 동점 처리 우선순위)
        """
        ordered: List[NamedLocation] = []
        index: Dict[str, NamedLocation] = {}
        for entry in entries:
            key = _normalize(entry.name)
            if not key or key in index:
                continue
            index[key] = entry
            ordered.append(entry)

        self._entries: Tuple[NamedLocation, ...] = tuple(ordered)
        self._index = index
        self._keys: Tuple[str, ...] = tuple(_normalize(e.name) for e in ordered)
        self._patterns = {k: re.compile(r"\b" + re.escape(k) + r"\b") for k in self._keys}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return _normalize(name) in self._index

    @property
    def entries(self) -> Tuple[NamedLocation, ...]:
        return self._entries

    def get(self, name: str) -> Optional[NamedLocation]:
        """정확한 키로 항목을 조회합니다."""
        return self._index.get(_normalize(name))

    def resolve(self, text: Optional[str]) -> Optional[NamedLocation]:
        """
        자유 텍스트 지명을 좌표로 변환합니다.

        Args:
            text: 사용자 입력 지명 또는 문장

        Returns:
            매칭된 지명 항목, 없으면 None
        """
        query = _normalize(text)
        if not query:
            return None

        # 1) 정확 매칭
        exact = self._index.get(query)
        if exact is not None:
            return exact

        # 2) 가장 긴 부분 문자열 매칭
        best = self._longest_match(query)
        if best is not None:
            return best

        # 3) 전치사 패턴 추출
        best = self._preposition_match(query)
        if best is not None:
            return best

        log.info(f"지명 매칭 실패 text:{text!r}")
        return None

    def require(self, text: Optional[str]) -> NamedLocation:
        """지명을 변환하고 실패 시 LocationUnresolved를 발생시킵니다."""
        found = self.resolve(text)
        if found is None:
            raise LocationUnresolved(text)
        return found

    def _longest_match(self, query: str) -> Optional[NamedLocation]:
        best_key = ""
        for key in self._keys:
            if len(key) <= len(best_key):
                continue
            if self._patterns[key].search(query):
                best_key = key
            elif len(query) >= MIN_FRAGMENT_LEN and query in key:
                best_key = key
        return self._index[best_key] if best_key else None

    def _preposition_match(self, query: str) -> Optional[NamedLocation]:
        words = query.split(" ")
        for i, word in enumerate(words[:-1]):
            if word not in PREPOSITIONS:
                continue
            candidate = re.sub(r"[.,!?]", "", words[i + 1])
            if len(candidate) < MIN_FRAGMENT_LEN:
                continue

            best_key = ""
            for key in self._keys:
                if len(key) > len(best_key) and (candidate in key or key in candidate):
                    best_key = key
            if best_key:
                return self._index[best_key]
        return None

def _entries_from_rows(rows: Sequence[Tuple[str, float, float]]) -> List[NamedLocation]:
    return [
        NamedLocation(name=name, coordinate=Coordinate(lat=lat, lng=lng))
        for name, lat, lng in rows
    ]

_DEFAULT: Optional[Gazetteer] = None

def default_gazetteer() -> Gazetteer:
    """내장 싱가포르 지명 사전을 반환합니다 (프로세스 단위로 한 번 생성)."""
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = Gazetteer(_entries_from_rows(SINGAPORE_PLACES))
    return _DEFAULT

def _parse_row(row_num: int, name, lat_val, lng_val) -> Optional[NamedLocation]:
    if not name or not str(name).strip():
        return None
    try:
        lat = float(lat_val)
        lng = float(lng_val)
    except (ValueError, TypeError):
        log.warning(f"행 {row_num} 위도/경도 변환 실패: lat={lat_val}, lng={lng_val}")
        return None
    if not validate_coordinates(lat, lng):
        log.warning(f"행 {row_num} 좌표 범위 초과: lat={lat}, lng={lng}")
        return None
    return NamedLocation(name=str(name).strip().lower(), coordinate=Coordinate(lat=lat, lng=lng))

def load_gazetteer(path: str) -> Gazetteer:
    """
    지명 사전을 파일에서 로드합니다.

    Args:
        path: CSV 또는 XLSX 파일 경로 (name, lat, lng 컬럼)

    Returns:
        로드된 지명 사전
    """
    ext = os.path.splitext(path)[1].lower()
    entries: List[NamedLocation] = []

    if ext == ".csv":
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            missing = {"name", "lat", "lng"} - set(reader.fieldnames or [])
            if missing:
                raise ValueError(f"필수 컬럼이 없습니다: {sorted(missing)}")
            for row_num, r in enumerate(reader, start=2):
                entry = _parse_row(row_num, r.get("name"), r.get("lat"), r.get("lng"))
                if entry is not None:
                    entries.append(entry)
    elif ext in (".xlsx", ".xlsm"):
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
        try:
            ws = wb.active
            rows = ws.iter_rows(values_only=True)
            headers = [str(h).strip().lower() if h is not None else "" for h in next(rows, ())]
            idx = {h: i for i, h in enumerate(headers)}
            missing = {"name", "lat", "lng"} - set(idx)
            if missing:
                raise ValueError(f"필수 컬럼이 없습니다: {sorted(missing)}. 사용 가능한 컬럼: {headers}")
            for row_num, row in enumerate(rows, start=2):
                entry = _parse_row(row_num, row[idx["name"]], row[idx["lat"]], row[idx["lng"]])
                if entry is not None:
                    entries.append(entry)
        finally:
            wb.close()
    else:
        raise ValueError(f"지원하지 않는 파일 형식: {ext or path}")

    log.info(f"지명 사전 로드됨 path:{path} count:{len(entries)}")
    return Gazetteer(entries)
