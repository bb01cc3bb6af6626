"""
Translation Evidence
Translates the configured phrase into every configured language and records
each call as a citation and a personalised greeting row.
"""

from __future__ import annotations

from .base import BaseEvidenceBuilder, EvidenceResult
from ..credentials import TranslateCredentials
from ..models import DisplayField, Evidence, IdField, RowSchema


TRANSLATION_ROW = RowSchema(
    id_field=IdField("lang_id"),
    fields=(
        DisplayField("language", "Language", order=1),
        DisplayField("phrase", "Phrase", order=2),
    ),
)


class TranslationEvidence(BaseEvidenceBuilder):
    topic = "Language"
    schema = TRANSLATION_ROW

    @property
    def caption(self) -> str:
        return f"{self.config.service_name} {self.config.phrase} Translations"

    @property
    def description(self) -> str:
        return f"List of translations of the term '{self.config.phrase}, [user]'"

    async def build(
        self,
        evidence: Evidence,
        credentials: TranslateCredentials,
        result: EvidenceResult,
    ):
        languages = self.config.languages
        translations = await self.gather_queries(
            [
                (
                    f"translate:{lang.code}",
                    self.client.translate(
                        self.config.phrase,
                        target=lang.code,
                        source=self.config.source_language,
                    ),
                )
                for lang in languages
            ],
            result,
        )

        for lang, translation in zip(languages, translations):
            if translation is None:
                continue
            evidence.add_source(translation.url, translation.text)
            evidence.add_row(self.schema.row(
                lang_id=lang.code,
                language=lang.name,
                phrase=f"{translation.text}, {credentials.primary_user}",
            ))
