from __future__ import annotations

import pytest

from EXOCAL.client.common.exceptions import ValidationError
from EXOCAL.client.entities.jobs import InputSelection, SelectedFile, SubmissionParameters
from EXOCAL.client.services.payload import build_upload_payload


# -------------------------------------------------------------------------
def test_empty_selection_raises_validation_error():
    with pytest.raises(ValidationError) as error:
        build_upload_payload(InputSelection(), SubmissionParameters())

    assert str(error.value) == "no input provided"


# -------------------------------------------------------------------------
def test_file_and_demo_slots_become_multipart_fields():
    selection = InputSelection()
    selection.select_file("koi", SelectedFile(filename="koi.csv", content=b"kepid\n1\n"))
    selection.set_demo("k2")

    payload = build_upload_payload(selection, SubmissionParameters(limit_targets=10, seed=3))

    assert payload.field_names == ["koi", "use_demo_k2"]
    assert payload.parts[0] == ("koi", ("koi.csv", b"kepid\n1\n", "text/csv"))
    assert payload.parts[1] == ("use_demo_k2", (None, b"true", None))
    assert payload.params == {"limit_targets": 10, "seed": 3}


# -------------------------------------------------------------------------
def test_empty_slots_are_omitted():
    selection = InputSelection()
    selection.set_demo("toi")

    payload = build_upload_payload(selection, SubmissionParameters())

    assert payload.field_names == ["use_demo_toi"]


# -------------------------------------------------------------------------
def test_unreadable_file_raises_validation_error(tmp_path):
    selection = InputSelection()
    selection.select_file("koi", str(tmp_path / "missing.csv"))

    with pytest.raises(ValidationError) as error:
        build_upload_payload(selection, SubmissionParameters())

    assert str(error.value) == "Cannot read selected file missing.csv"
