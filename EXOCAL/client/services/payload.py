from __future__ import annotations

from dataclasses import dataclass, field

from EXOCAL.client.common.constants import (
    CSV_CONTENT_TYPE,
    DEMO_FIELD_TEMPLATE,
    DEMO_FIELD_VALUE,
    FILE_UNREADABLE_MESSAGE,
    NO_INPUT_MESSAGE,
)
from EXOCAL.client.common.exceptions import ValidationError
from EXOCAL.client.entities.jobs import InputSelection, SubmissionParameters

# httpx multipart part: (filename, content, content type). A None filename
# makes httpx emit a plain form field instead of a file part.
MultipartPart = tuple[str | None, bytes, str | None]


###############################################################################
@dataclass(frozen=True)
class UploadPayload:
    parts: list[tuple[str, MultipartPart]] = field(default_factory=list)
    params: dict[str, int] = field(default_factory=dict)

    # -------------------------------------------------------------------------
    @property
    def field_names(self) -> list[str]:
        return [name for name, _ in self.parts]


# -------------------------------------------------------------------------
def build_upload_payload(
    selection: InputSelection, parameters: SubmissionParameters
) -> UploadPayload:
    filled_slots = selection.filled_slots()
    if not filled_slots:
        raise ValidationError(NO_INPUT_MESSAGE)

    parts: list[tuple[str, MultipartPart]] = []
    for slot in filled_slots:
        if slot.file is not None:
            try:
                content = slot.file.read()
            except (OSError, ValueError) as exc:
                raise ValidationError(
                    FILE_UNREADABLE_MESSAGE.format(filename=slot.file.filename)
                ) from exc
            parts.append((slot.kind, (slot.file.filename, content, CSV_CONTENT_TYPE)))
        else:
            demo_field = DEMO_FIELD_TEMPLATE.format(kind=slot.kind)
            parts.append((demo_field, (None, DEMO_FIELD_VALUE.encode("utf-8"), None)))

    return UploadPayload(parts=parts, params=parameters.to_query_params())
