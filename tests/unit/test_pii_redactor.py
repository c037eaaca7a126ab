"""
Tests for resume_rag.ml.ethics.pii_redactor — text redaction and role views.
"""

import pytest

from resume_rag.data.models import PersonalInfo
from resume_rag.ml.ethics import PIIRedactor
from resume_rag.utils.constants import UserRole


@pytest.fixture
def redactor():
    return PIIRedactor()


SAMPLE_TEXT = (
    "Jane Smith\n"
    "jane.smith@example.com | (555) 123-4567\n"
    "123 Main Street, Springfield, IL 62704\n"
    "Born 04/12/1990. SSN 123-45-6789.\n"
    "Senior engineer with eight years of Python experience."
)


# ── redact ───────────────────────────────────────────────────────────────────


class TestRedact:
    def test_email(self, redactor):
        assert redactor.redact("Contact: a.b@mail.co") == "Contact: [EMAIL REDACTED]"

    def test_phone(self, redactor):
        result = redactor.redact("Call +1 555-123-4567 today")
        assert "[PHONE REDACTED]" in result
        assert "4567" not in result

    def test_address(self, redactor):
        result = redactor.redact("Lives at 42 Oak Avenue Boston MA 02115")
        assert "[ADDRESS REDACTED]" in result
        assert "Oak" not in result

    def test_ssn(self, redactor):
        assert redactor.redact("SSN 123-45-6789") == "SSN [SSN REDACTED]"

    def test_date_of_birth(self, redactor):
        assert redactor.redact("DOB 04/12/1990") == "DOB [DOB REDACTED]"

    def test_name_from_personal_info(self, redactor):
        info = PersonalInfo(name="Jane Smith")
        result = redactor.redact("Jane Smith leads the team. Smith wrote the API.", info)
        assert "Jane" not in result
        assert "Smith" not in result
        assert result.count("[NAME REDACTED]") == 2

    def test_name_parts_are_whole_words(self, redactor):
        info = PersonalInfo(name="Al Smith")
        result = redactor.redact("Alan works with Al on algorithms", info)
        assert "Alan" in result
        assert "algorithms" in result
        assert "[NAME REDACTED]" in result

    def test_no_pii_unchanged(self, redactor):
        text = "Experienced Python developer with Django and PostgreSQL."
        assert redactor.redact(text) == text

    def test_empty_text(self, redactor):
        assert redactor.redact("") == ""

    def test_idempotent(self, redactor):
        info = PersonalInfo(name="Jane Smith", email="jane.smith@example.com")
        once = redactor.redact(SAMPLE_TEXT, info)
        assert redactor.redact(once, info) == once
        assert redactor.redact(once) == once

    def test_details_counts(self, redactor):
        result = redactor.redact_with_details(SAMPLE_TEXT, PersonalInfo(name="Jane Smith"))
        assert result.redacted_categories["email"] == 1
        assert result.redacted_categories["name"] >= 1
        assert result.redactions_made == sum(result.redacted_categories.values())
        assert result.original_text == SAMPLE_TEXT


# ── redact: known personal-info values ───────────────────────────────────────


class TestRedactKnownValues:
    def test_non_us_phone_and_address(self, redactor):
        info = PersonalInfo(
            name="Jane Doe", phone="+44 20 7946 0958", address="Flat 3, 12 Baker St, London",
        )
        text = "Jane Doe. Call +44 20 7946 0958. Lives at Flat 3, 12 Baker St, London. Python developer."
        assert redactor.redact(text, info) == (
            "[NAME REDACTED]. Call [PHONE REDACTED]. Lives at [ADDRESS REDACTED]. Python developer."
        )

    def test_phone_with_different_separators(self, redactor):
        info = PersonalInfo(phone="+44 20 7946 0958")
        result = redactor.redact("Mobile: +44 (20) 7946-0958", info)
        assert result == "Mobile: [PHONE REDACTED]"

    def test_address_case_and_line_breaks(self, redactor):
        info = PersonalInfo(address="Flat 3, 12 Baker St, London")
        result = redactor.redact("flat 3, 12 baker st,\nlondon", info)
        assert result == "[ADDRESS REDACTED]"

    def test_date_of_birth_value(self, redactor):
        info = PersonalInfo(date_of_birth="12 March 1990")
        assert redactor.redact("Born 12 March 1990", info) == "Born [DOB REDACTED]"

    def test_profile_links(self, redactor):
        info = PersonalInfo(linkedin="linkedin.com/in/janedoe", github="github.com/jdoe")
        result = redactor.redact("See linkedin.com/in/janedoe and github.com/jdoe", info)
        assert result == "See [PROFILE REDACTED] and [PROFILE REDACTED]"

    def test_regex_metacharacters_escaped(self, redactor):
        info = PersonalInfo(address="Unit (B) + 7 Rue [Haute]")
        assert redactor.redact("At Unit (B) + 7 Rue [Haute].", info) == "At [ADDRESS REDACTED]."

    def test_short_phone_ignored(self, redactor):
        info = PersonalInfo(phone="123")
        assert redactor.redact("Shipped 123 features", info) == "Shipped 123 features"

    def test_details_counts_known_values(self, redactor):
        info = PersonalInfo(phone="+44 20 7946 0958", address="Flat 3, 12 Baker St, London")
        result = redactor.redact_with_details(
            "+44 20 7946 0958 / Flat 3, 12 Baker St, London / +44 20 7946 0958", info
        )
        assert result.redacted_categories == {"phone": 2, "address": 1}

    def test_idempotent_with_known_values(self, redactor):
        info = PersonalInfo(
            name="Jane Doe", phone="+44 20 7946 0958", address="Flat 3, 12 Baker St, London",
        )
        once = redactor.redact("Jane Doe, +44 20 7946 0958, Flat 3, 12 Baker St, London", info)
        assert redactor.redact(once, info) == once


# ── strip ────────────────────────────────────────────────────────────────────


class TestStrip:
    def test_candidate_view_hides_personal_info(self, redactor, make_resume):
        resume = make_resume()
        view = redactor.strip(resume, UserRole.CANDIDATE)
        assert "personal_info" not in view
        assert "jane.smith@example.com" not in view["text"]
        assert "[EMAIL REDACTED]" in view["text"]

    @pytest.mark.parametrize("role", ["recruiter", "admin", UserRole.RECRUITER])
    def test_privileged_view_keeps_personal_info(self, redactor, make_resume, role):
        resume = make_resume()
        view = redactor.strip(resume, role)
        assert view["personal_info"]["email"] == "jane.smith@example.com"
        assert view["text"] == resume.text

    def test_embedding_and_redacted_text_dropped_for_all_roles(self, redactor, make_resume):
        resume = make_resume()
        for role in UserRole:
            view = redactor.strip(resume, role)
            assert "embedding" not in view
            assert "redacted_text" not in view

    def test_unknown_role_treated_as_unprivileged(self, redactor, make_resume):
        view = redactor.strip(make_resume(), "guest")
        assert "personal_info" not in view

    def test_redacts_on_the_fly_when_redacted_text_missing(self, redactor, make_resume):
        resume = make_resume()
        resume.redacted_text = ""
        view = redactor.strip(resume, UserRole.CANDIDATE)
        assert "jane.smith@example.com" not in view["text"]
        assert "Jane" not in view["text"]

    def test_on_the_fly_redaction_uses_known_values(self, redactor, make_resume):
        resume = make_resume(
            phone="+44 20 7946 0958",
            text="Jane Smith, +44 20 7946 0958, Flat 3, 12 Baker St, London. Python developer.",
        )
        resume.personal_info.address = "Flat 3, 12 Baker St, London"
        resume.redacted_text = ""
        view = redactor.strip(resume, UserRole.CANDIDATE)
        assert "7946" not in view["text"]
        assert "Baker" not in view["text"]
        assert "[ADDRESS REDACTED]" in view["text"]

    def test_accepts_dict_documents(self, redactor, make_resume):
        data = make_resume().model_dump(mode="json")
        view = redactor.strip(data, "candidate")
        assert "personal_info" not in view
        assert "embedding" not in view
