"""
게스트 프로그램 내용 다이제스트
================================

로컬 백엔드에서 "프로그램 바이너리"는 파이썬 함수이므로, 프로그램 식별자를
함수의 이름이 아니라 내용으로부터 만든다.

**다이제스트에 들어가는 것** (SHA-256):
  - 바이트코드 (co_code), 상수 (co_consts, 중첩 코드 포함), 참조 이름 (co_names)
  - 기본 인자 값, 클로저 셀 값
  - 같은 전역 공간에서 참조하는 함수 (재귀적으로) 와 원시 타입 상수
  - 호출 가능한 객체는 __call__ 의 내용과 인스턴스 속성

이름만 같고 동작이 다른 두 에이전트는 서로 다른 식별자를 받고,
같은 팩토리로 같은 인자를 주어 만든 에이전트는 같은 식별자를 받는다.
바이트코드는 인터프리터 버전마다 다르므로 식별자도 인터프리터 버전에 묶인다.

사용 예시:
    >>> code_digest(make_column_agent(0)) == code_digest(make_column_agent(0))  # True
    >>> code_digest(make_column_agent(0)) == code_digest(make_column_agent(1))  # False
"""

import hashlib
import types

_PRIMITIVES = (type(None), bool, int, float, complex, str, bytes)


def code_digest(*objects):
    """호출 가능한 객체들의 내용 다이제스트 (32바이트)."""
    h = hashlib.sha256()
    seen = set()
    for obj in objects:
        _feed(h, obj, seen)
    return h.digest()


def _tag(h, label):
    h.update(label.encode() + b"\x00")


def _global_names(code):
    names = set(code.co_names)
    for const in code.co_consts:
        if isinstance(const, types.CodeType):
            names.update(_global_names(const))
    return sorted(names)


def _feed(h, obj, seen):
    if isinstance(obj, _PRIMITIVES):
        _tag(h, f"{type(obj).__name__}:{obj!r}")
    elif isinstance(obj, (tuple, list)):
        _tag(h, f"seq:{len(obj)}")
        for item in obj:
            _feed(h, item, seen)
    elif isinstance(obj, (set, frozenset)):
        _tag(h, f"set:{len(obj)}")
        for item in sorted(obj, key=repr):
            _feed(h, item, seen)
    elif isinstance(obj, dict):
        _tag(h, f"dict:{len(obj)}")
        for key in sorted(obj, key=repr):
            _feed(h, key, seen)
            _feed(h, obj[key], seen)
    elif isinstance(obj, types.CodeType):
        _tag(h, "code")
        h.update(obj.co_code)
        _feed(h, obj.co_consts, seen)
        _feed(h, obj.co_names, seen)
    elif isinstance(obj, types.FunctionType):
        _feed_function(h, obj, seen)
    elif isinstance(obj, types.MethodType):
        _tag(h, "method")
        _feed(h, obj.__func__, seen)
        _feed(h, obj.__self__, seen)
    elif isinstance(obj, types.BuiltinFunctionType):
        _tag(h, f"builtin:{obj.__module__}.{obj.__qualname__}")
    elif isinstance(getattr(type(obj), "__call__", None), types.FunctionType):
        # 호출 가능한 인스턴스
        if id(obj) in seen:
            _tag(h, "seen-instance")
            return
        seen.add(id(obj))
        _tag(h, f"instance:{type(obj).__qualname__}")
        _feed_function(h, type(obj).__call__, seen)
        _feed(h, dict(getattr(obj, "__dict__", {})), seen)
    else:
        # 기본 repr은 메모리 주소를 담고 있으므로 타입 이름만 쓴다
        _tag(h, f"opaque:{type(obj).__module__}.{type(obj).__qualname__}")


def _feed_function(h, fn, seen):
    if id(fn) in seen:
        _tag(h, f"seen:{fn.__qualname__}")
        return
    seen.add(id(fn))

    _tag(h, "function")
    _feed(h, fn.__code__, seen)
    _feed(h, fn.__defaults__, seen)
    _feed(h, fn.__kwdefaults__, seen)
    _feed(h, [cell.cell_contents for cell in fn.__closure__ or ()], seen)

    for name in _global_names(fn.__code__):
        if name not in fn.__globals__:
            continue
        value = fn.__globals__[name]
        if isinstance(value, _PRIMITIVES + (types.FunctionType,)):
            _tag(h, f"global:{name}")
            _feed(h, value, seen)
