"""
Language Support Evidence
Records whether each configured language is offered by the service, backed
by a single languages listing call.
"""

from __future__ import annotations

from .base import BaseEvidenceBuilder, EvidenceResult
from ..credentials import TranslateCredentials
from ..models import DisplayField, Evidence, IdField, RowSchema


LANGUAGE_SUPPORT_ROW = RowSchema(
    id_field=IdField("lang_id"),
    fields=(
        DisplayField("language", "Language", order=10),
        DisplayField("offered", "Offered", order=20),
    ),
)


class LanguageSupportEvidence(BaseEvidenceBuilder):
    topic = "Language Support"
    schema = LANGUAGE_SUPPORT_ROW

    @property
    def description(self) -> str:
        return "Configured languages and whether the service offers them"

    async def build(
        self,
        evidence: Evidence,
        credentials: TranslateCredentials,
        result: EvidenceResult,
    ):
        (listing,) = await self.gather_queries(
            [("languages", self.client.list_languages())],
            result,
        )
        if listing is None:
            return

        evidence.add_source(listing.url, ", ".join(listing.languages))
        for lang in self.config.languages:
            evidence.add_row(self.schema.row(
                lang_id=lang.code,
                language=lang.name,
                offered="Yes" if lang.code in listing.languages else "No",
            ))
