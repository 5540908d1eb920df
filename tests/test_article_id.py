"""Tests for the EBSCO article identifier."""

from virgo_articles.providers.ebsco.article_id import MISSING_PART, ArticleId, decode, encode


class TestArticleId:
    def test_raw_form(self):
        article = ArticleId("edsmzh:1993066095")
        assert article.dbid == "edsmzh"
        assert article.an == "1993066095"
        assert str(article) == "edsmzh:1993066095"

    def test_encoded_form(self):
        article = ArticleId("edsmzh%3A1993066095")
        assert article.dbid == "edsmzh"
        assert article.an == "1993066095"
        assert article.encoded == "edsmzh%3A1993066095"

    def test_lowercase_encoded_separator(self):
        assert ArticleId("edsmzh%3a1993066095") == ArticleId("edsmzh:1993066095")

    def test_separate_parts(self):
        article = ArticleId("edsmzh", "1993066095")
        assert article.encoded == "edsmzh%3A1993066095"
        assert article.decoded == "edsmzh:1993066095"

    def test_round_trip_through_encoded(self):
        original = ArticleId("a9h", "12.345/x")
        assert ArticleId(original.encoded) == original

    def test_accession_number_with_colon(self):
        article = ArticleId("db:an:part")
        assert article.an == "an:part"
        assert ArticleId(article.encoded).an == "an:part"

    def test_copy(self):
        article = ArticleId("edsmzh:1")
        assert ArticleId(article) == article

    def test_missing_parts(self):
        article = ArticleId()
        assert str(article) == f"{MISSING_PART}:{MISSING_PART}"

    def test_hashable(self):
        assert len({ArticleId("a:1"), ArticleId("a%3A1"), ArticleId("b:1")}) == 2


class TestEncoding:
    def test_encode_escapes_period(self):
        assert encode("a.b:c") == "a%2Eb%3Ac"

    def test_decode(self):
        assert decode("a%2Eb%3Ac") == "a.b:c"
