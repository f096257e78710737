"""
프로그램 식별자 & 설정(키 쌍) 캐시
===================================

프로그램 바이너리(의 SHA-256)를 키로, 한 번만 유도되는 불변 KeyPair를 값으로
갖는 프로세스 범위 캐시.

**단일 설정 보장**:
  - 식별자마다 잠금(lock)을 하나씩 두고, 생성 경로만 그 잠금으로 감싼다.
  - 같은 식별자를 동시에 요청한 호출자들은 하나의 유도만 실행되는 것을 보고,
    나머지는 기다렸다가 같은 KeyPair를 받는다.
  - 저장된 KeyPair는 불변이므로 저장 후의 읽기에는 잠금이 필요 없다.
  - 식별자별 잠금은 쥐고 있거나 기다리는 호출자 수로 관리하며, 그 수가 0이
    되면 (유도 성공, 실패, forget 뒤) 레지스트리에서 지운다.
  - derivations/hits 카운터는 별도의 잠금 아래에서만 증가한다.

**실패**:
  유도 실패는 SetupError로 올라가며 캐시에 남지 않는다.
  다음 호출은 처음부터 다시 유도한다.

사용 예시:
    >>> cache = KeyPairCache(LocalBackend())
    >>> kp = cache.get_or_create(program)
    >>> cache.get_or_create(program) is kp  # True, 재유도 없음
"""

import logging
import threading
from collections import Counter
from contextlib import contextmanager

from zkarena.errors import SetupError

logger = logging.getLogger(__name__)


class KeyPairCache:
    """식별자 → KeyPair. 여러 스레드에서 동시에 사용해도 안전하다.

    속성:
        derivations: 식별자별 유도 실행 횟수 (실패 포함하지 않음)
        hits: 식별자별 캐시 적중 횟수
    """

    def __init__(self, backend):
        self.backend = backend
        self._pairs = {}
        # identity -> [Lock, 잠금을 쥐었거나 기다리는 호출자 수]
        self._locks = {}
        self._registry_lock = threading.Lock()
        self._counter_lock = threading.Lock()
        self.derivations = Counter()
        self.hits = Counter()

    @contextmanager
    def _locked(self, identity):
        with self._registry_lock:
            entry = self._locks.setdefault(identity, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._registry_lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[identity]

    def _count(self, counter, identity):
        with self._counter_lock:
            counter[identity] += 1

    def get(self, identity):
        """이미 유도된 KeyPair 또는 None. 유도를 시작하지 않는다."""
        return self._pairs.get(identity)

    def get_or_create(self, program):
        """프로그램의 KeyPair를 반환한다. 처음 요청이면 유도한다.

        Raises:
            SetupError: 백엔드가 키 쌍을 만들지 못했을 때 (캐시되지 않음)
        """
        identity = program.program_id
        pair = self._pairs.get(identity)
        if pair is not None:
            self._count(self.hits, identity)
            return pair

        with self._locked(identity):
            pair = self._pairs.get(identity)
            if pair is not None:
                self._count(self.hits, identity)
                return pair

            logger.info("deriving key pair for %s (%s)", program.name, identity[:12])
            try:
                pair = self.backend.setup(program)
            except Exception as exc:
                logger.error("setup failed for %s: %s", program.name, exc)
                raise SetupError(identity, f"{type(exc).__name__}: {exc}") from exc
            if pair.program_id != identity:
                raise SetupError(identity, f"backend returned keys for {pair.program_id[:12]}")

            self._count(self.derivations, identity)
            self._pairs[identity] = pair
            return pair

    def forget(self, identity):
        """저장된 KeyPair를 지운다. 다음 요청은 다시 유도한다."""
        with self._locked(identity):
            self._pairs.pop(identity, None)

    def __contains__(self, identity):
        return identity in self._pairs

    def __len__(self):
        return len(self._pairs)

    def stats(self):
        with self._counter_lock:
            derivations = dict(self.derivations)
            hits = dict(self.hits)
        return {
            identity: {
                "derivations": derivations.get(identity, 0),
                "hits": hits.get(identity, 0),
                "vk_hash": pair.verification_key.vk_hash.hex(),
            }
            for identity, pair in list(self._pairs.items())
        }
