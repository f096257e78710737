"""
TinyDB 기반 매치 저장소.

매치 하나가 문서 하나이며 ``match_id``로 upsert 한다. 비밀 스칼라는 저장하지
않는다 (공개 커밋먼트만). 증명 번들을 보관해 두면 정산이 실패한 뒤에도
증명을 다시 만들지 않고 같은 번들을 재제출할 수 있다.
"""

from tinydb import Query, TinyDB
from tinydb.storages import MemoryStorage

MATCH = Query()


def open_db(path):
    """":memory:"이면 메모리 DB, 아니면 파일 DB."""
    if path == ":memory:":
        return TinyDB(storage=MemoryStorage)
    return TinyDB(path)


class MatchStore:
    def __init__(self, db):
        self.db = db
        self.matches = db.table("matches")

    def get(self, match_id):
        result = self.matches.search(MATCH.match_id == match_id)
        if not result:
            return None
        return result[0]

    def put(self, match_id, doc):
        doc = dict(doc, match_id=match_id)
        self.matches.upsert(doc, MATCH.match_id == match_id)
        return doc

    def update(self, match_id, **fields):
        self.matches.update(fields, MATCH.match_id == match_id)
        return self.get(match_id)

    def remove(self, match_id):
        self.matches.remove(MATCH.match_id == match_id)

    def all(self):
        return self.matches.all()
