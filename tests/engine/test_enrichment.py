from __future__ import annotations

from types import SimpleNamespace

import pytest

from news_relay.config import TranslatorConfig
from news_relay.engine import Enricher, Item, Translator
from news_relay.errors import TranslationError

from stubs import EchoTranslator, FailingTranslator


class FakeCompletions:
    def __init__(self, content=None, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.requests: list[dict] = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions: FakeCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_translator_sends_persian_instruction() -> None:
    completions = FakeCompletions(content="  سلام  ")
    translator = Translator(TranslatorConfig(model="gpt-4o-mini"), client=_client(completions))

    assert translator.translate("hello") == "سلام"
    (request,) = completions.requests
    assert request["model"] == "gpt-4o-mini"
    assert request["messages"] == [
        {"role": "user", "content": "Translate the following text to Persian:\nhello"}
    ]


def test_translator_empty_response_raises() -> None:
    translator = Translator(TranslatorConfig(), client=_client(FakeCompletions(content="")))
    with pytest.raises(TranslationError):
        translator.translate("hello")


def test_translator_api_error_is_wrapped() -> None:
    from openai import OpenAIError

    completions = FakeCompletions(error=OpenAIError("rate limited"))
    translator = Translator(TranslatorConfig(), client=_client(completions))
    with pytest.raises(TranslationError) as excinfo:
        translator.translate("hello")
    assert excinfo.value.details["type"] == "OpenAIError"


def test_translator_without_api_key_raises_translation_error() -> None:
    translator = Translator(TranslatorConfig(api_key=""))
    with pytest.raises(TranslationError):
        translator.translate("hello")


def test_enricher_translates_title_and_summary() -> None:
    translator = EchoTranslator()
    item = Item(title="A", link="http://x/a", summary="s")

    enriched = Enricher(translator).enrich(item)

    assert enriched.translated_title == "fa:A"
    assert enriched.translated_summary == "fa:s"
    assert item.translated_title is None
    assert translator.calls == ["A", "s"]


def test_enricher_skips_missing_summary() -> None:
    translator = EchoTranslator()
    enriched = Enricher(translator).enrich(Item(title="A"))
    assert enriched.translated_summary is None
    assert translator.calls == ["A"]


def test_enricher_falls_back_per_field() -> None:
    translator = FailingTranslator(fail_on=lambda text: text == "s")
    enriched = Enricher(translator).enrich(Item(title="A", summary="s"))
    assert enriched.translated_title == "fa:A"
    assert enriched.translated_summary == "s"


def test_enricher_tolerates_unexpected_errors() -> None:
    class Broken:
        def translate(self, text: str) -> str:
            raise TimeoutError("slow")

    enriched = Enricher(Broken()).enrich(Item(title="A", summary="s"))
    assert enriched.translated_title == "A"
    assert enriched.translated_summary == "s"
