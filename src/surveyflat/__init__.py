"""
Survey Response Export Package

Flattens nested, versioned survey responses into rectangular exports
(wide CSV, long CSV, JSON records) and survey definitions into codebooks.

ARCHITECTURAL GUARANTEE:
------------------------
The column schema of an export is computed once, from ALL versions of the
survey, before the first row is written. Every row of an export has the
same columns, whichever version the response was recorded against.

Layers:
    definition     stored survey documents -> SurveyVersionPreview
    handlers       one handler per question type (columns + values)
    version_resolver   response -> survey version
    parser         response -> ParsedResponse -> row / record
    exporter       streaming writers (wide, long, json)
    survey_info    codebook export
"""

__version__ = "0.1.0"
