from collections import deque
from decimal import Decimal
from typing import Any, Callable

import orjson

JSONDefault = Callable[[Any], Any]
Serializer = Callable[[Any], bytes]


def default_json_encoder(obj: Any) -> Any:
    """orjson default 훅.

    - Decimal -> str (정밀도 보존)
    - deque/tuple/set -> list
    """
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (deque, set, frozenset)):
        return list(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def to_bytes(value: Any, *, pretty: bool = False) -> bytes:
    """객체를 UTF-8 JSON bytes로 직렬화 (orjson).

    pretty=True 이면 2칸 들여쓰기 (사람이 읽는 저장 파일용)
    """
    option = orjson.OPT_INDENT_2 if pretty else 0
    return orjson.dumps(value, default=default_json_encoder, option=option)


def to_text(value: Any) -> str:
    """소켓 전송용 JSON 문자열"""
    return to_bytes(value).decode("utf-8")


def from_frame(frame: str | bytes | bytearray) -> Any:
    """소켓 프레임(JSON) 역직렬화. 실패 시 orjson.JSONDecodeError"""
    return orjson.loads(frame)
