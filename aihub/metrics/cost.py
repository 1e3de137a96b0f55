"""
Cost Estimation for Generation Requests

Estimates the cost of a completion from the token usage reported by the
provider and the per-1K-token price recorded in the model catalog.
"""

from dataclasses import dataclass

from aihub.registry.models import ModelCatalog, ModelDescriptor, get_model_catalog


@dataclass
class CostBreakdown:
    """
    Cost estimate for a single generation.

    Attributes:
        input_tokens: Number of prompt tokens processed
        output_tokens: Number of completion tokens generated
        cost_per_1k_tokens: Catalog price applied
        estimated_cost_usd: total_tokens / 1000 * cost_per_1k_tokens
        model_used: Id of the model that served the request
    """

    input_tokens: int
    output_tokens: int
    cost_per_1k_tokens: float
    estimated_cost_usd: float
    model_used: str

    @property
    def total_tokens(self) -> int:
        """Total tokens processed (input + output)."""
        return self.input_tokens + self.output_tokens


class CostCalculator:
    """
    Estimate generation costs from catalog pricing.

    Example:
        calculator = CostCalculator()
        cost = calculator.calculate_by_model_id("groq/llama3-8b", 150, 50)
        print(f"${cost.estimated_cost_usd:.6f}")
    """

    def calculate(
        self, model: ModelDescriptor, input_tokens: int, output_tokens: int
    ) -> CostBreakdown:
        """
        Calculate the cost estimate for a request.

        Args:
            model: Catalog descriptor with pricing information
            input_tokens: Number of prompt tokens used
            output_tokens: Number of completion tokens generated

        Returns:
            CostBreakdown for the request
        """
        total = input_tokens + output_tokens
        return CostBreakdown(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_per_1k_tokens=model.cost_per_1k_tokens,
            estimated_cost_usd=total / 1000 * model.cost_per_1k_tokens,
            model_used=model.id,
        )

    def calculate_by_model_id(
        self,
        model_id: str,
        input_tokens: int,
        output_tokens: int,
        catalog: ModelCatalog | None = None,
    ) -> CostBreakdown | None:
        """
        Calculate cost using a catalog lookup.

        Args:
            model_id: Catalog id; "cached" and unknown ids have no price
            input_tokens: Number of prompt tokens used
            output_tokens: Number of completion tokens generated
            catalog: Catalog to price against (default: the global catalog)

        Returns:
            CostBreakdown if the model is in the catalog, None otherwise
        """
        model = (catalog if catalog is not None else get_model_catalog()).get(model_id)
        if model is None:
            return None
        return self.calculate(model, input_tokens, output_tokens)


_calculator: CostCalculator | None = None


def get_cost_calculator() -> CostCalculator:
    """
    Get the global cost calculator instance.

    Returns:
        Singleton CostCalculator instance
    """
    global _calculator
    if _calculator is None:
        _calculator = CostCalculator()
    return _calculator
