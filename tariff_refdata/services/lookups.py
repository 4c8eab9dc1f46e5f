from __future__ import annotations

import re
from collections.abc import Iterable

from ..models.dataset_kind import DatasetKind
from ..models.records import TarifPortProduct, TecArticle, VocProduct
from .lookup_cache import LookupCache

"""Record lookups used by the tariff calculator.

Each lookup exists twice: a coroutine reading through ``LookupCache.get_async``
and a ``*_sync`` variant on ``LookupCache.get_sync`` that never waits on the
network. The matching rules live in the module-level functions so both
variants share them.

HS codes are compared after removing dots and whitespace, so
"8471.30.00.00" finds sh10 code "8471300000".
"""

__all__ = [
    "ReferenceLookup",
    "normalize_code",
    "find_tec_article",
    "search_by_designation",
    "search_tec_by_code",
    "tec_rates_of",
    "find_voc_product",
    "TEC_RATE_FIELDS",
]

_CODE_NOISE = re.compile(r"[.\s]")

TEC_RATE_FIELDS = ("dd", "rsta", "pcs", "pua", "pcc", "cumul_sans_tva", "cumul_avec_tva", "tva")


def normalize_code(code: object) -> str:
    return _CODE_NOISE.sub("", str(code))


def find_tec_article(articles: Iterable[TecArticle], code: str) -> TecArticle | None:
    wanted = normalize_code(code)
    if not wanted:
        return None
    for article in articles:
        if normalize_code(article.sh10_code) == wanted or normalize_code(article.sh6_code) == wanted:
            return article
    return None


def search_by_designation(records: Iterable[TecArticle | VocProduct], query: str) -> list:
    needle = query.lower()
    return [r for r in records if needle in r.designation.lower()]


def search_tec_by_code(articles: Iterable[TecArticle], query: str) -> list[TecArticle]:
    needle = query.lower()
    return [a for a in articles if needle in a.sh10_code.lower() or needle in a.sh6_code.lower()]


def tec_rates_of(article: TecArticle | None) -> dict[str, float] | None:
    if article is None:
        return None
    return {name: getattr(article, name) for name in TEC_RATE_FIELDS}


def find_voc_product(products: Iterable[VocProduct], code: str) -> VocProduct | None:
    wanted = normalize_code(code)
    if not wanted:
        return None
    for product in products:
        if normalize_code(product.code_sh) == wanted:
            return product
    return None


def _voc_exempted(product: VocProduct | None) -> bool:
    # Unknown products are treated as exempt
    return product.exempte if product is not None else True


def _tarifport_by_libelle(products: Iterable[TarifPortProduct], text: str) -> TarifPortProduct | None:
    needle = text.lower()
    return next((p for p in products if needle in p.libelle_produit.lower()), None)


def _tarifport_by_attr(products: Iterable[TarifPortProduct], attr: str, value: str) -> TarifPortProduct | None:
    wanted = str(value).lower()
    return next((p for p in products if str(getattr(p, attr) or "").lower() == wanted), None)


class ReferenceLookup:
    """Find/search helpers over the cached reference datasets."""

    def __init__(self, cache: LookupCache) -> None:
        self.cache = cache

    async def _tec(self) -> list[TecArticle]:
        return await self.cache.get_async(DatasetKind.TEC)  # type: ignore[return-value]

    async def _voc(self) -> list[VocProduct]:
        return await self.cache.get_async(DatasetKind.VOC)  # type: ignore[return-value]

    async def _tarifport(self) -> list[TarifPortProduct]:
        return await self.cache.get_async(DatasetKind.TARIFPORT)  # type: ignore[return-value]

    def _tec_sync(self) -> list[TecArticle]:
        return self.cache.get_sync(DatasetKind.TEC)  # type: ignore[return-value]

    def _voc_sync(self) -> list[VocProduct]:
        return self.cache.get_sync(DatasetKind.VOC)  # type: ignore[return-value]

    def _tarifport_sync(self) -> list[TarifPortProduct]:
        return self.cache.get_sync(DatasetKind.TARIFPORT)  # type: ignore[return-value]

    # TEC
    async def tec_article(self, code: str) -> TecArticle | None:
        return find_tec_article(await self._tec(), code)

    def tec_article_sync(self, code: str) -> TecArticle | None:
        return find_tec_article(self._tec_sync(), code)

    async def search_tec(self, query: str) -> list[TecArticle]:
        return search_by_designation(await self._tec(), query)

    def search_tec_sync(self, query: str) -> list[TecArticle]:
        return search_by_designation(self._tec_sync(), query)

    async def search_tec_by_code(self, query: str) -> list[TecArticle]:
        return search_tec_by_code(await self._tec(), query)

    def search_tec_by_code_sync(self, query: str) -> list[TecArticle]:
        return search_tec_by_code(self._tec_sync(), query)

    async def tec_rates(self, code: str) -> dict[str, float] | None:
        return tec_rates_of(await self.tec_article(code))

    def tec_rates_sync(self, code: str) -> dict[str, float] | None:
        return tec_rates_of(self.tec_article_sync(code))

    # VOC
    async def voc_product(self, code: str) -> VocProduct | None:
        return find_voc_product(await self._voc(), code)

    def voc_product_sync(self, code: str) -> VocProduct | None:
        return find_voc_product(self._voc_sync(), code)

    async def search_voc(self, query: str) -> list[VocProduct]:
        return search_by_designation(await self._voc(), query)

    def search_voc_sync(self, query: str) -> list[VocProduct]:
        return search_by_designation(self._voc_sync(), query)

    async def is_voc_exempted(self, code: str) -> bool:
        return _voc_exempted(await self.voc_product(code))

    def is_voc_exempted_sync(self, code: str) -> bool:
        return _voc_exempted(self.voc_product_sync(code))

    # TarifPORT
    async def tarifport_by_libelle(self, text: str) -> TarifPortProduct | None:
        return _tarifport_by_libelle(await self._tarifport(), text)

    def tarifport_by_libelle_sync(self, text: str) -> TarifPortProduct | None:
        return _tarifport_by_libelle(self._tarifport_sync(), text)

    async def tarifport_by_code_redevance(self, code: str) -> TarifPortProduct | None:
        return _tarifport_by_attr(await self._tarifport(), "coderedevance", code)

    def tarifport_by_code_redevance_sync(self, code: str) -> TarifPortProduct | None:
        return _tarifport_by_attr(self._tarifport_sync(), "coderedevance", code)

    async def tarifport_by_tp(self, tp: str) -> TarifPortProduct | None:
        return _tarifport_by_attr(await self._tarifport(), "tp", tp)

    def tarifport_by_tp_sync(self, tp: str) -> TarifPortProduct | None:
        return _tarifport_by_attr(self._tarifport_sync(), "tp", tp)
