from typing import Optional

from portal.schemas.common import CamelModel


# ------------------------------------------------------------
# SUBJECT CREATE / UPDATE
# ------------------------------------------------------------
class SubjectUpsert(CamelModel):
    subject_id: Optional[str] = None
    subject_name: Optional[str] = None
    theory_hours: Optional[int] = None
    practice_hours: Optional[int] = None

    def validation_error(self) -> Optional[str]:
        if not self.subject_id or not self.subject_name \
                or self.theory_hours is None or self.practice_hours is None:
            return "All fields are required"

        if self.theory_hours < 0 or self.practice_hours < 0:
            return "Hours cannot be negative"

        return None
