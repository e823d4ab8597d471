"""Tests for the CSV writer."""

import csv

import pytest

from tutorscout.common.exceptions import WriteError
from tutorscout.data_types import TutorRecord
from tutorscout.output import write_records_csv

HEADER = [
    "Link",
    "Name",
    "Contact Info",
    "Experience",
    "Qualifications",
    "Rates",
    "Gender",
    "Registered",
    "Location",
    "Subject",
    "email_extract",
    "mobile_extract",
]


def read_rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_header_order(tmp_path):
    path = tmp_path / "out.csv"

    assert write_records_csv([], path) == 0
    assert read_rows(path) == [HEADER]


def test_rows_written_in_order(tmp_path):
    path = tmp_path / "out.csv"
    records = [
        TutorRecord(link="/tutor/1", name="Zoë", location="Perth"),
        TutorRecord(
            link="/tutor/2",
            name="Sam",
            contact_info="sam@example.com\n0412 345 678",
            email_extract="sam@example.com",
            mobile_extract="0412345678",
        ),
    ]

    assert write_records_csv(records, path) == 2

    rows = read_rows(path)
    assert rows[1][:2] == ["/tutor/1", "Zoë"]
    assert rows[1][8] == "Perth"
    assert rows[1][10:] == ["N/A", "N/A"]
    assert rows[2][2] == "sam@example.com\n0412 345 678"
    assert rows[2][10:] == ["sam@example.com", "0412345678"]


def test_existing_file_overwritten(tmp_path):
    path = tmp_path / "out.csv"
    path.write_text("stale,data\n1,2\n3,4\n5,6\n", encoding="utf-8")

    write_records_csv([TutorRecord(link="/tutor/1")], path)

    rows = read_rows(path)
    assert rows[0] == HEADER
    assert len(rows) == 2


def test_accepts_generator(tmp_path):
    path = tmp_path / "out.csv"
    records = (TutorRecord(link=f"/tutor/{n}") for n in range(3))

    assert write_records_csv(records, path) == 3


def test_unwritable_path_raises_write_error(tmp_path):
    path = tmp_path / "missing" / "out.csv"

    with pytest.raises(WriteError) as exc_info:
        write_records_csv([], path)

    assert exc_info.value.path == str(path)
    assert isinstance(exc_info.value.__cause__, OSError)
