"""
Unit Tests for the Members Directory document
Tests for: report header, filter summary, pagination and continuation pages
"""
from datetime import date, datetime
from types import SimpleNamespace

import pytest

from credensuite.schemas import MemberFilter
from credensuite.services.member_directory import (
    CONTINUATION_PAGE_ROWS,
    FIRST_PAGE_ROWS,
    build_directory_html,
    filter_summary,
    format_report_date,
    paginate,
)


def make_member(n, **overrides):
    data = dict(
        member_id=f"ORG-2024-{n:03d}",
        full_name=f"Member {n}",
        designation="volunteer",
        joining_date=date(2024, 1, 15),
        contact_number="555-123-4567",
        is_active=True,
    )
    data.update(overrides)
    return SimpleNamespace(**data)


def make_settings(**overrides):
    data = dict(
        organization_name="Hope Foundation NGO",
        phone_number="(555) 123-4567",
        email_address="info@hopefoundation.org",
        address="123 Main Street",
        website="https://hopefoundation.org",
    )
    data.update(overrides)
    return SimpleNamespace(**data)


GENERATED = datetime(2024, 3, 1, 9, 0, 0)


class TestReportHeader:

    def test_org_details_and_report_info(self):
        html = build_directory_html([make_member(1), make_member(2)], make_settings(), generated_at=GENERATED)

        assert "<h1>Hope Foundation NGO</h1>" in html
        assert "Phone: (555) 123-4567" in html
        assert "Email: info@hopefoundation.org" in html
        assert "Website: https://hopefoundation.org" in html
        assert "Address: 123 Main Street" in html
        assert "MEMBERS DIRECTORY" in html
        assert "Generated on: March 1, 2024" in html
        assert "Total Members: 2" in html

    def test_missing_org_details_are_left_out(self):
        html = build_directory_html([], make_settings(email_address=None, website=None), generated_at=GENERATED)

        assert "Email:" not in html
        assert "Website:" not in html

    def test_no_settings_uses_placeholder_name(self):
        html = build_directory_html([], None, generated_at=GENERATED)

        assert "Your Organization" in html
        assert "Generated by Your Organization" in html

    def test_report_date_has_no_leading_zero(self):
        assert format_report_date(datetime(2024, 12, 5)) == "December 5, 2024"


class TestTable:

    def test_columns_and_row_values(self):
        member = make_member(7, designation="coordinator", is_active=False, joining_date=date(2024, 2, 9))

        html = build_directory_html([member], make_settings(), generated_at=GENERATED)

        for title in ("ID", "Name", "Role", "Contact", "Joining Date", "Status"):
            assert f"<th>{title}</th>" in html
        assert "<td>ORG-2024-007</td>" in html
        assert "<td>Coordinator</td>" in html
        assert "<td>02/09/2024</td>" in html
        assert "<td>Inactive</td>" in html

    def test_values_are_escaped(self):
        html = build_directory_html(
            [make_member(1, full_name="<b>Bold</b>")],
            make_settings(organization_name="Tom & Jerry"),
            generated_at=GENERATED,
        )

        assert "<b>Bold</b>" not in html
        assert "&lt;b&gt;Bold&lt;/b&gt;" in html
        assert "Tom &amp; Jerry" in html

    def test_rows_keep_given_order(self):
        html = build_directory_html([make_member(3), make_member(1)], make_settings(), generated_at=GENERATED)

        assert html.index("ORG-2024-003") < html.index("ORG-2024-001")


class TestFilterSummary:

    def test_no_filters(self):
        assert filter_summary(None) == []
        assert filter_summary(MemberFilter()) == []

    def test_search_role_and_status(self):
        filters = MemberFilter(search="walker", designation="manager", status="inactive")

        assert filter_summary(filters) == ['Search: "walker"', "Role: Manager", "Status: Inactive"]

    def test_fielded_mode(self):
        assert filter_summary(MemberFilter(joining_date=date(2024, 1, 10))) == ['Joining Date: "01/10/2024"']
        assert filter_summary(MemberFilter(emergency_phone="900")) == ['Emergency Phone: "900"']

    def test_summary_rendered(self):
        html = build_directory_html(
            [], make_settings(), MemberFilter(designation="volunteer"), generated_at=GENERATED
        )

        assert "Applied Filters:" in html
        assert "<li>Role: Volunteer</li>" in html


class TestPagination:

    def test_empty_list_is_one_page(self):
        assert paginate([]) == [[]]

    @pytest.mark.parametrize("count,sizes", [
        (FIRST_PAGE_ROWS, [FIRST_PAGE_ROWS]),
        (FIRST_PAGE_ROWS + 1, [FIRST_PAGE_ROWS, 1]),
        (FIRST_PAGE_ROWS + CONTINUATION_PAGE_ROWS + 1, [FIRST_PAGE_ROWS, CONTINUATION_PAGE_ROWS, 1]),
    ])
    def test_page_sizes(self, count, sizes):
        assert [len(page) for page in paginate(list(range(count)))] == sizes

    def test_continuation_pages(self):
        members = [make_member(n) for n in range(1, FIRST_PAGE_ROWS + CONTINUATION_PAGE_ROWS + 2)]

        html = build_directory_html(members, make_settings(), generated_at=GENERATED)

        assert html.count('class="directory-page"') == 3
        assert html.count("MEMBERS DIRECTORY (continued)") == 2
        assert html.count("<thead>") == 3
        assert "Page 1 of 3" in html
        assert "Page 3 of 3" in html
        assert html.count("Generated by Hope Foundation NGO") == 3
        assert f"Total Members: {len(members)}" in html
        assert html.count("Generated on:") == 1

    def test_separator_every_fifth_member_across_pages(self):
        members = [make_member(n) for n in range(1, FIRST_PAGE_ROWS + 9)]

        html = build_directory_html(members, make_settings(), generated_at=GENERATED)

        assert html.count('<tr class="group-end">') == len(members) // 5
