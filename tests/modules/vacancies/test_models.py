"""
Unit tests for vacancy table definitions.
"""

from tutormatch.modules.vacancies.models import VacancyApplication
from tutormatch.modules.vacancies.service import TEACHER_FK_CONSTRAINT


class TestApplicationForeignKeys:
    def test_vacancy_owns_its_applications(self):
        (fk,) = VacancyApplication.__table__.c.vacancy_id.foreign_keys
        assert fk.ondelete == "CASCADE"

    def test_teacher_reference_does_not_cascade(self):
        """Deleting a teacher must not delete their applications."""
        (fk,) = VacancyApplication.__table__.c.teacher_id.foreign_keys
        assert fk.ondelete is None

    def test_teacher_constraint_name_matches_error_mapping(self):
        (fk,) = VacancyApplication.__table__.c.teacher_id.foreign_keys
        assert fk.name == TEACHER_FK_CONSTRAINT
