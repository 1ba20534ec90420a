"""
Survey info (codebook) export.

Flattens the schema itself, one CSV row per (version, question, slot,
option). No response data is involved.
"""

import csv
from typing import List, Sequence, TextIO

from surveyflat.errors import SinkIOError
from surveyflat.model import SurveyVersionPreview
from surveyflat.parser import short_key_versions

SURVEY_INFO_HEADER = [
    "surveyKey", "versionID", "questionKey", "title",
    "responseKey", "type", "optionKey", "optionType", "optionLabel",
]


class SurveyInfoExporter:
    """
    Codebook of all versions of one survey.

    Args:
        versions: Version previews (not modified)
        survey_key: Survey key, written to every row
        short_keys: Strip "<survey_key>." from question IDs
    """

    def __init__(self, versions: Sequence[SurveyVersionPreview], survey_key: str, short_keys: bool = False):
        self.survey_key = survey_key
        if short_keys and survey_key:
            self.versions = short_key_versions(versions, survey_key)
        else:
            self.versions = list(versions)

    def get_survey_infos(self) -> List[SurveyVersionPreview]:
        return self.versions

    def rows(self) -> List[List[str]]:
        """Codebook rows without header; an empty version ID becomes the version's index."""
        rows = []
        for i, version in enumerate(self.versions):
            version_id = version.version_id or str(i)
            for question in version.questions:
                question_cols = [self.survey_key, version_id, question.id, question.title]
                for slot in question.responses:
                    slot_cols = [slot.id, slot.response_type]
                    if not slot.options:
                        rows.append(question_cols + slot_cols + ["", "", ""])
                        continue
                    for option in slot.options:
                        rows.append(question_cols + slot_cols + [option.id, option.option_type, option.label])
        return rows

    def write_csv(self, sink: TextIO) -> None:
        """
        Write header and rows to `sink`.

        Raises:
            SinkIOError: If the sink fails
        """
        writer = csv.writer(sink)
        try:
            writer.writerow(SURVEY_INFO_HEADER)
            writer.writerows(self.rows())
            sink.flush()
        except OSError as e:
            raise SinkIOError(f"failed to write survey info: {e}") from e


__all__ = ["SURVEY_INFO_HEADER", "SurveyInfoExporter"]
