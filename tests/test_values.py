"""Tests for single-field value validators."""
import pytest

from knodeledge.models import values


class TestIds:
    """Tests for the id validators."""

    @pytest.mark.parametrize(
        "validator,field",
        [
            (values.validate_chapter_id, "chapter id"),
            (values.validate_graph_id, "graph id"),
            (values.validate_paper_id, "paper id"),
            (values.validate_section_id, "section id"),
        ],
    )
    def test_empty_id_is_rejected(self, validator, field):
        with pytest.raises(ValueError) as exc_info:
            validator("")
        assert str(exc_info.value) == f"{field} is required, but got ''"

    @pytest.mark.parametrize(
        "validator,field",
        [
            (values.validate_user_id, "user id"),
            (values.validate_project_id, "project id"),
        ],
    )
    def test_empty_user_and_project_ids_do_not_echo_the_value(self, validator, field):
        _, message = values.check(validator, "")
        assert message == f"{field} is required"

    def test_non_empty_id_is_returned(self):
        assert values.validate_project_id("0000000000000001") == "0000000000000001"


class TestNames:
    """Tests for name length rules."""

    def test_name_of_100_characters_is_valid(self):
        name = "a" * 100
        assert values.validate_chapter_name(name) == name

    def test_name_of_101_characters_is_rejected(self):
        name = "a" * 101
        with pytest.raises(ValueError) as exc_info:
            values.validate_chapter_name(name)
        assert str(exc_info.value) == (
            f"chapter name cannot be longer than 100 characters, but got '{name}'"
        )

    def test_name_length_counts_characters_not_bytes(self):
        name = "あ" * 100
        assert values.validate_graph_name(name) == name

    def test_empty_name_is_rejected(self):
        _, message = values.check(values.validate_project_name, "")
        assert message == "project name is required, but got ''"


class TestChapterNumber:
    """Tests for chapter number rules."""

    def test_positive_number_is_valid(self):
        assert values.validate_chapter_number(1) == 1

    @pytest.mark.parametrize("raw", [0, -1])
    def test_non_positive_number_is_rejected(self, raw):
        _, message = values.check(values.validate_chapter_number, raw)
        assert message == f"chapter number must be greater than 0, but got '{raw}'"

    def test_bool_is_not_a_number(self):
        _, message = values.check(values.validate_chapter_number, True)
        assert message == "chapter number must be greater than 0, but got 'True'"


class TestOptionalText:
    """Tests for relation and description rules."""

    def test_empty_relation_and_description_are_valid(self):
        assert values.validate_graph_relation("") == ""
        assert values.validate_graph_description("") == ""
        assert values.validate_project_description("") == ""

    def test_relation_of_101_characters_is_rejected(self):
        relation = "r" * 101
        _, message = values.check(values.validate_graph_relation, relation)
        assert message == (
            f"graph relation cannot be longer than 100 characters, but got '{relation}'"
        )

    def test_description_of_401_characters_is_rejected(self):
        description = "d" * 401
        _, message = values.check(values.validate_graph_description, description)
        assert message == (
            "graph description cannot be longer than 400 characters, "
            f"but got '{description}'"
        )

    def test_project_description_message_does_not_echo_the_value(self):
        _, message = values.check(values.validate_project_description, "d" * 401)
        assert message == "project description cannot be longer than 400 characters"


class TestByteLimits:
    """Paragraph and content limits are measured in UTF-8 bytes."""

    def test_40000_ascii_characters_pass(self):
        paragraph = "a" * 40000
        assert values.validate_graph_paragraph(paragraph) == paragraph

    def test_40000_multibyte_characters_fail(self):
        paragraph = "あ" * 40000
        _, message = values.check(values.validate_graph_paragraph, paragraph)
        assert message == (
            "graph paragraph must be less than or equal to 40000 bytes, "
            "but got 120000 bytes"
        )

    def test_paper_and_section_content_use_their_own_field_names(self):
        content = "a" * 40001
        _, paper_msg = values.check(values.validate_paper_content, content)
        _, section_msg = values.check(values.validate_section_content, content)
        assert paper_msg.startswith("paper content must be")
        assert section_msg.startswith("section content must be")


class TestCheck:
    def test_check_returns_value_and_empty_message(self):
        assert values.check(values.validate_user_id, "u") == ("u", "")

    def test_check_returns_none_and_message(self):
        value, message = values.check(values.validate_user_id, "")
        assert value is None
        assert message == "user id is required"
