from bulk_ingest.quality import GOOD, MODERATE, POOR, assess_quality, grade_for, quality_to_dict


CONTACT_HEADERS = ["Company name", "FirstName", "Last Name", "Email Id", "Designation", "Phone"]


def test_contact_quality_report(workbook_bytes) -> None:
    content = workbook_bytes(
        CONTACT_HEADERS + ["Notes"],
        [
            ["Acme", "Ada", "Lovelace", "ada@acme.io", "CTO", "+1 415 555 0100", "x"],
            ["grace@navy.mil", "Grace", "Hopper", "US Navy", "Admiral", None, None],
            ["Initech", "Peter", None, "peter-at-initech", None, "555-0100", None],
            ["Acme", None, None, "someone@acme.io", None, None, None],
        ],
    )

    report = assess_quality(content)

    assert report.total_rows == 4
    assert report.swapped_rows == 1
    assert report.invalid_emails == 1
    assert report.complete_rows == 2
    assert report.grade == MODERATE
    assert report.backfilled == {"phone": 2}
    assert report.field_coverage["phone"] == 2
    assert report.distinct_companies == ("Acme", "Initech", "US Navy")
    assert report.sample_issues[0] == "Row 3: company and email appear swapped (repaired)"

    payload = quality_to_dict(report)
    assert payload["completeness"] == 0.5
    assert payload["columns"]["email"] == "Email Id"
    assert payload["ignoredColumns"] == ["Notes"]
    assert payload["distinctCompanies"] == 3


def test_sample_issues_are_bounded(workbook_bytes) -> None:
    rows = [[f"Co {index}", "Ann", None, "bad", None, None] for index in range(8)]

    report = assess_quality(workbook_bytes(CONTACT_HEADERS, rows), sample_size=3)

    assert len(report.sample_issues) == 3
    assert report.invalid_emails == 8
    assert report.grade == POOR


def test_grades() -> None:
    assert grade_for(0.8) == GOOD
    assert grade_for(0.79) == MODERATE
    assert grade_for(0.5) == MODERATE
    assert grade_for(0.49) == POOR


def test_moved_company_and_numeric_company(workbook_bytes) -> None:
    content = workbook_bytes(
        CONTACT_HEADERS,
        [
            [None, "Ada", None, "Acme Media", None, None],
            ["98765", "Bob", None, "bob@x.io", None, None],
        ],
    )

    report = assess_quality(content)

    assert report.moved_rows == 1
    assert report.complete_rows == 1
    assert report.distinct_companies == ("Acme Media",)
    assert report.sample_issues[0] == "Row 2: company name found in the email column (moved)"
    assert quality_to_dict(report)["movedRows"] == 1
