"""
トークン単価表とコスト計算

単価は起動時に固定され、実行中に変更しない。
"""

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from schema import Usage


_PER_1K = Decimal("1000")


@dataclass(frozen=True)
class ModelRate:
    """1トークンあたりの単価（USD）"""

    input_rate: Decimal
    output_rate: Decimal


ZERO_RATE = ModelRate(input_rate=Decimal("0"), output_rate=Decimal("0"))


@dataclass(frozen=True)
class PriceTable:
    rates: Mapping[str, ModelRate]

    def rate_for(self, model: str | None) -> ModelRate:
        """未知のモデルは単価0として扱う（エラーにしない）"""
        if model is None:
            return ZERO_RATE
        return self.rates.get(model, ZERO_RATE)

    def cost(self, model: str | None, usage: Usage | None) -> Decimal:
        """1リクエスト分のコストを計算
        Args:
            model: リクエストに使ったモデル
            usage: 上流が返したトークン使用量。無ければ0として扱う

        Returns:
            prompt_tokens * 入力単価 + completion_tokens * 出力単価
        """
        if usage is None:
            return Decimal("0")
        rate = self.rate_for(model)
        return (
            usage.prompt_tokens * rate.input_rate
            + usage.completion_tokens * rate.output_rate
        )


def _per_1k(input_cost: str, output_cost: str) -> ModelRate:
    return ModelRate(
        input_rate=Decimal(input_cost) / _PER_1K,
        output_rate=Decimal(output_cost) / _PER_1K,
    )


PRICE_TABLE = PriceTable(
    MappingProxyType(
        {
            "gpt-4": _per_1k("0.03", "0.06"),
            "o1-2024-12-17": _per_1k("0.015", "0.06"),
            "gpt-4o-2024-08-06": _per_1k("0.0025", "0.01"),
            "gpt-4o-mini": _per_1k("0.00015", "0.0006"),
        }
    )
)
