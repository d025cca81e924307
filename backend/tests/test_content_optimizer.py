"""Unit tests for the content optimizer."""
import pytest

from filing_insights.services.content_optimizer import (
    FALLBACK_PREFIX_CHARS,
    MAX_EXCERPT_CHARS,
    extract_key_sections,
    optimize_document_content,
)
from filing_insights.services.text_extractor import clean_text

STATEMENTS = "\n".join(
    [
        "Company registration number 01234567",
        "Balance sheet as at 31 March 2023",
        "Total assets 5,000,000",
        "Net liabilities 2,000,000",
        "Creditors due within one year",
        "Profit and loss account",
        "Turnover for the year 1,200,000",
        "Operating profit 300,000",
        "Random unrelated line here",
    ]
)


class TestOptimizeDocumentContent:
    """Test section selection and size limits."""

    def test_sections_split_at_statement_headers(self):
        optimized = optimize_document_content(STATEMENTS)

        assert optimized == (
            "Balance sheet as at 31 March 2023\n"
            "Total assets 5,000,000\n"
            "Net liabilities 2,000,000\n"
            "\n"
            "Profit and loss account\n"
            "Turnover for the year 1,200,000\n"
            "Operating profit 300,000"
        )

    def test_non_financial_lines_dropped(self):
        optimized = optimize_document_content(STATEMENTS)

        assert "Company registration" not in optimized
        assert "Random unrelated" not in optimized

    def test_header_detection_ignores_case(self):
        sections = extract_key_sections(
            "BALANCE SHEET\nFixed assets tangible 40,000\nCurrent assets debtors 12,500\n"
        )

        assert sections == ["BALANCE SHEET\nFixed assets tangible 40,000\nCurrent assets debtors 12,500"]

    def test_header_belongs_only_to_the_section_it_opens(self):
        sections = extract_key_sections(
            "Directors\nNet assets 1,000\n"
            "Profit and loss account for the year\nTurnover for the year 1,200,000\n"
        )

        assert sections == ["Profit and loss account for the year\nTurnover for the year 1,200,000"]

    def test_short_keyword_lines_skipped(self):
        sections = extract_key_sections("Net 5\nCash 10\nDirectors\nShare capital paid 100")

        assert sections == []

    def test_prefix_fallback_without_sections(self):
        text = "lorem ipsum dolor sit amet " * 200

        optimized = optimize_document_content(text)

        assert optimized == clean_text(text)[:FALLBACK_PREFIX_CHARS]
        assert len(optimized) == FALLBACK_PREFIX_CHARS

    @pytest.mark.parametrize("repeats", [1, 100, 1_000, 10_000])
    def test_output_never_exceeds_ceiling(self, repeats):
        text = "Revenue for the period grew strongly across all segments\n" * repeats

        assert len(optimize_document_content(text)) <= MAX_EXCERPT_CHARS

    def test_large_financial_document_truncated_to_ceiling(self):
        text = "Balance sheet\n" + "Total assets and liabilities reconciled for the group\n" * 500

        assert len(optimize_document_content(text)) == MAX_EXCERPT_CHARS

    def test_whitespace_normalized_before_selection(self):
        optimized = optimize_document_content(
            "Balance   sheet\n\n\n   Total assets\t\t5,000,000\n   Net liabilities   2,000,000   "
        )

        assert optimized == "Balance sheet\nTotal assets 5,000,000\nNet liabilities 2,000,000"
