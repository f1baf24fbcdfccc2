# streak_engine/core/errors.py
"""
챌린지 엔진 오류 분류
- NotFound  : 챌린지/일자/태스크 없음 (소유자가 아닌 경우도 동일하게 취급)
- Conflict  : 동시 수정 충돌 (버전 불일치)
- Forbidden : 마감된 하루 수정, 완료되지 않은 챌린지 재시작
- Validation: 잘못된 인덱스/날짜/기간
"""


class TrackerError(Exception):
    """Base class for all engine failures reported to the caller."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(TrackerError):
    status_code = 404


class ConflictError(TrackerError):
    status_code = 409


class ForbiddenError(TrackerError):
    status_code = 403


class ValidationError(TrackerError):
    status_code = 422
