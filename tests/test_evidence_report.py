"""
Tests for evidence building and report assembly.

These tests verify that:
1. Rows share one schema and citations cover every successful call
2. Output order is call order, whatever order responses arrive in
3. Partial failures keep already-built evidence and surface an error
4. Identical responses produce identical reports
"""

import asyncio

from conftest import HELLO, StubTranslateService, run

from translate_receptor.collectors import (
    EvidenceError,
    LanguageSupportEvidence,
    TranslationEvidence,
)
from translate_receptor.config import LanguageSpec, ReceptorConfig
from translate_receptor.credentials import TranslateCredentials
from translate_receptor.receptor import TranslateReceptor
from translate_receptor.service import TranslateClient


async def build_topic(builder_cls, stub, config, credentials):
    async with TranslateClient(config, transport=stub.transport()) as client:
        return await builder_cls(client, config).execute(credentials)


# =============================================================================
# END-TO-END
# =============================================================================

class TestEndToEnd:

    def test_hello_ada(self, receptor, credentials):
        """The reference example: three greetings for Ada, in order, all cited."""
        result = run(receptor.report(credentials))

        assert result.error is None
        evidence = result.report.find("Language")
        assert evidence.caption == "Translate Hello Translations"
        assert evidence.description == "List of translations of the term 'Hello, [user]'"
        assert [r.to_dict() for r in evidence.rows] == [
            {"id": "en", "Language": "English", "Phrase": "Hello, Ada"},
            {"id": "it", "Language": "Italian", "Phrase": "Ciao, Ada"},
            {"id": "de", "Language": "German", "Phrase": "Hallo, Ada"},
        ]
        assert [s.observed_value for s in evidence.sources] == ["Hello", "Ciao", "Hallo"]
        for source, code in zip(evidence.sources, ["en", "it", "de"]):
            assert f"target={code}" in source.reference
            assert "q=Hello" in source.reference


# =============================================================================
# TRANSLATION TOPIC
# =============================================================================

class TestTranslationEvidence:

    def test_rows_share_field_order(self, stub, config, credentials):
        result = run(build_topic(TranslationEvidence, stub, config, credentials))
        orders = {tuple(label for label, _ in row.cells()) for row in result.evidence.rows}
        assert orders == {("id", "Language", "Phrase")}

    def test_citations_cover_rows(self, stub, config, credentials):
        result = run(build_topic(TranslationEvidence, stub, config, credentials))
        assert len(result.evidence.sources) >= len(result.evidence.rows)
        assert result.metadata["queries_issued"] == 3

    def test_order_independent_of_completion(self, config, credentials):
        """en answers last and de first; rows still follow configured order."""
        stub = StubTranslateService(delays={"en": 0.06, "it": 0.03, "de": 0})
        result = run(build_topic(TranslationEvidence, stub, config, credentials))

        assert [r.identifier for r in result.evidence.rows] == ["en", "it", "de"]
        assert [s.observed_value for s in result.evidence.sources] == ["Hello", "Ciao", "Hallo"]
        assert stub.max_in_flight == 3

    def test_failed_query_continues_siblings(self, config, credentials):
        stub = StubTranslateService(fail_targets=("it",))
        result = run(build_topic(TranslationEvidence, stub, config, credentials))

        assert [r.identifier for r in result.evidence.rows] == ["en", "de"]
        assert [s.observed_value for s in result.evidence.sources] == ["Hello", "Hallo"]
        assert isinstance(result.error, EvidenceError)
        assert result.error.topic == "Language"
        [failure] = result.error.failures
        assert failure.query == "translate:it"
        assert "target=it" in failure.reference
        assert "backend error for it" in str(failure.cause)

    def test_source_language_sent_when_configured(self, stub, credentials):
        config = ReceptorConfig(source_language="en")
        run(build_topic(TranslationEvidence, stub, config, credentials))
        assert all(r.url.params["source"] == "en" for r in stub.requests)

    def test_phrase_from_config(self, credentials):
        stub = StubTranslateService(translations={"fr": "Au revoir"})
        config = ReceptorConfig(phrase="Goodbye", languages=[LanguageSpec("fr", "French")])
        result = run(build_topic(TranslationEvidence, stub, config, credentials))

        assert result.evidence.caption == "Translate Goodbye Translations"
        assert result.evidence.rows[0].get("phrase") == "Au revoir, Ada"
        assert stub.requests[0].url.params["q"] == "Goodbye"


# =============================================================================
# LANGUAGE SUPPORT TOPIC
# =============================================================================

class TestLanguageSupportEvidence:

    def test_offered_flags(self, config, credentials):
        stub = StubTranslateService(offered={"en": "English", "de": "German"})
        result = run(build_topic(LanguageSupportEvidence, stub, config, credentials))

        assert result.error is None
        assert [r.to_dict() for r in result.evidence.rows] == [
            {"id": "en", "Language": "English", "Offered": "Yes"},
            {"id": "it", "Language": "Italian", "Offered": "No"},
            {"id": "de", "Language": "German", "Offered": "Yes"},
        ]
        [source] = result.evidence.sources
        assert source.reference.endswith("/languages?target=en")
        assert source.observed_value == "en, de"

    def test_listing_failure_leaves_empty_evidence(self, config, credentials):
        stub = StubTranslateService(listing_status=500)
        result = run(build_topic(LanguageSupportEvidence, stub, config, credentials))

        assert result.evidence.rows == ()
        assert result.evidence.sources == ()
        assert result.error.failures[0].query == "languages"


# =============================================================================
# REPORT ASSEMBLY
# =============================================================================

class TestReport:

    def test_topic_order(self, receptor, credentials):
        result = run(receptor.report(credentials))
        assert [e.entity_type for e in result.report] == ["Language", "Language Support"]
        assert receptor.topics() == ["Language", "Language Support"]

    def test_topic_order_under_slow_first_topic(self, config, credentials):
        stub = StubTranslateService(delays={code: 0.05 for code in HELLO})
        receptor = TranslateReceptor(config, transport=stub.transport())
        result = run(receptor.report(credentials))
        assert [e.entity_type for e in result.report] == ["Language", "Language Support"]

    def test_evidence_is_sealed(self, receptor, credentials):
        result = run(receptor.report(credentials))
        assert all(e.sealed for e in result.report)

    def test_idempotent(self, receptor, credentials):
        first = run(receptor.report(credentials)).report
        second = run(receptor.report(credentials)).report

        def content(report):
            return [
                ([r.to_dict() for r in e.rows], [s.to_dict() for s in e.sources])
                for e in report
            ]

        assert content(first) == content(second)

    def test_failing_topic_keeps_other_evidence(self, config, credentials):
        stub = StubTranslateService(listing_status=500)
        receptor = TranslateReceptor(config, transport=stub.transport())

        result = run(receptor.report(credentials))

        assert len(result.report) == 2
        assert len(result.report.find("Language").rows) == 3
        assert result.report.find("Language Support").rows == ()
        assert result.error.topic == "Language Support"

    def test_malformed_listing_keeps_other_evidence(self, config, credentials):
        """A listing body of the wrong shape fails its topic, not the report."""
        stub = StubTranslateService(listing_body={"data": None})
        receptor = TranslateReceptor(config, transport=stub.transport())

        result = run(receptor.report(credentials))

        assert [e.entity_type for e in result.report] == ["Language", "Language Support"]
        assert len(result.report.find("Language").rows) == 3
        assert result.report.find("Language Support").rows == ()
        assert result.error.topic == "Language Support"
        assert "no data.languages list" in str(result.error)

    def test_last_error_wins(self, config, credentials):
        stub = StubTranslateService(listing_status=500, fail_targets=("de",))
        receptor = TranslateReceptor(config, transport=stub.transport())

        result = run(receptor.report(credentials))

        assert result.error.topic == "Language Support"
        assert [r.identifier for r in result.report.find("Language").rows] == ["en", "it"]

    def test_concurrent_reports_do_not_interfere(self, receptor):
        async def both():
            return await asyncio.gather(
                receptor.report(TranslateCredentials("Ada")),
                receptor.report(TranslateCredentials("Grace")),
            )

        ada, grace = run(both())
        assert ada.report.find("Language").rows[1].get("phrase") == "Ciao, Ada"
        assert grace.report.find("Language").rows[1].get("phrase") == "Ciao, Grace"


class TestBuildEvidence:

    def test_single_topic(self, receptor, credentials):
        result = run(receptor.build_evidence(credentials, "Language Support"))
        assert result.error is None
        assert result.evidence.entity_type == "Language Support"

    def test_unknown_topic(self, receptor, stub, credentials):
        result = run(receptor.build_evidence(credentials, "Weather"))

        assert result.evidence is None
        assert isinstance(result.error, EvidenceError)
        assert "Unknown topic 'Weather'" in str(result.error)
        assert stub.requests == []
