"""
FastAPI application entry point and endpoint definitions.

This module builds the FastAPI application and defines all API routes
for the recipe shopping and price comparison service.

Responsibilities:
- Initialize FastAPI application with CORS and error handling
- Wire the service layer at startup (refusing to start without an LLM key)
- Define recipe, product comparison and savings endpoints
- Translate service errors into HTTP responses
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from savvy_cart.config import settings
from savvy_cart.models.cart import (
    CreateShoppingCartRequest,
    RecipeActionRequest,
    RecipeShoppingRequest,
    SearchIngredientPricesRequest,
    SearchIngredientPricesResponse,
    ShoppingCart,
)
from savvy_cart.models.comparison import (
    ComparisonItem,
    FindAlternativesRequest,
    ProductEquivalencyRequest,
    ProductEquivalencyResult,
    SavingsSuggestionRequest,
    SavingsSuggestionResponse,
)
from savvy_cart.models.product import CatalogProduct
from savvy_cart.models.recipe import FindRecipeIngredientsRequest, FindRecipeIngredientsResponse
from savvy_cart.services.llm_client import GeminiClient, LLMClient
from savvy_cart.services.price_search import IngredientPriceSearch
from savvy_cart.services.product_equivalency import ProductEquivalencyChecker
from savvy_cart.services.product_search import ProductSearchClient
from savvy_cart.services.product_selector import BestProductSelector
from savvy_cart.services.recipe_discovery import RecipeDiscovery
from savvy_cart.services.recipe_shopping import RecipeShoppingService
from savvy_cart.services.savings_advisor import SavingsAdvisor
from savvy_cart.utils.constants import DEFAULT_COST_TABLE
from savvy_cart.utils.errors import RecipeDiscoveryError
from savvy_cart.utils.validators import validate_search_query

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@dataclass
class AppServices:
    """Service layer instances shared by all requests."""
    llm: LLMClient
    search_client: ProductSearchClient
    shopping: RecipeShoppingService
    equivalency: ProductEquivalencyChecker
    savings: SavingsAdvisor

    async def aclose(self) -> None:
        await self.search_client.aclose()
        await self.llm.aclose()


def build_services(
    llm: Optional[LLMClient] = None,
    search_client: Optional[ProductSearchClient] = None,
) -> AppServices:
    """
    Construct the service layer.

    Real Gemini and aggregator clients are created for anything not
    passed in.
    """
    llm = llm or GeminiClient()
    search_client = search_client or ProductSearchClient(cost_table=DEFAULT_COST_TABLE)

    selector = BestProductSelector(llm, DEFAULT_COST_TABLE)
    price_search = IngredientPriceSearch(search_client, selector, llm, DEFAULT_COST_TABLE)
    shopping = RecipeShoppingService(RecipeDiscovery(llm), price_search, DEFAULT_COST_TABLE)

    return AppServices(
        llm=llm,
        search_client=search_client,
        shopping=shopping,
        equivalency=ProductEquivalencyChecker(llm),
        savings=SavingsAdvisor(llm, DEFAULT_COST_TABLE),
    )


def get_services(request: Request) -> AppServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Services not initialized. Check app startup wiring.")
    return services


router = APIRouter()


@router.get("/")
async def root():
    """
    Root endpoint for health check.

    Returns:
        dict: API status and version information
    """
    return {
        "message": "Savvy Cart Recipe Shopping API",
        "version": API_VERSION,
        "status": "running"
    }


# ==================== Recipe Shopping ====================

@router.post("/recipe/ingredients", response_model=FindRecipeIngredientsResponse)
async def find_recipe_ingredients(
    request: FindRecipeIngredientsRequest,
    services: AppServices = Depends(get_services),
) -> FindRecipeIngredientsResponse:
    """
    Find the ingredients of a recipe.

    Raises:
        HTTPException: 400 for an invalid recipe name, 502 if discovery fails
    """
    try:
        return await services.shopping.discovery.find_recipe_ingredients(request.recipe_name)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RecipeDiscoveryError as e:
        logger.error(f"Recipe discovery failed: {str(e)}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.post("/recipe/prices", response_model=SearchIngredientPricesResponse)
async def search_ingredient_prices(
    request: SearchIngredientPricesRequest,
    services: AppServices = Depends(get_services),
) -> SearchIngredientPricesResponse:
    """
    Find the best product per ingredient on each requested platform.

    Basic pantry items and anything listed in userHas are skipped.
    Partial results are returned with a message naming what was not found.
    """
    logger.info(f"Price search for {len(request.ingredients)} ingredients")
    try:
        return await services.shopping.search_ingredient_prices(
            request.ingredients, request.platforms, request.user_has
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/recipe/cart", response_model=ShoppingCart)
async def create_shopping_cart(
    request: CreateShoppingCartRequest,
    services: AppServices = Depends(get_services),
) -> ShoppingCart:
    """Group selected products by platform, with totals and the best platform."""
    return services.shopping.create_shopping_cart(request.products, request.platforms)


@router.post("/recipe/shop", response_model=ShoppingCart)
async def recipe_shopping_flow(
    request: RecipeShoppingRequest,
    services: AppServices = Depends(get_services),
) -> ShoppingCart:
    """
    End-to-end: recipe name -> ingredients -> prices -> cart.

    Failures inside the flow come back as an empty cart with an apology
    message, never as an error status.
    """
    return await services.shopping.recipe_shopping_flow(
        request.recipe_name, request.platforms, request.user_has
    )


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


@router.post("/recipe")
async def recipe_action(
    request: RecipeActionRequest,
    services: AppServices = Depends(get_services),
):
    """
    Action dispatcher: {"action": "...", "data": {...}}.

    Supported actions: findRecipeIngredients, searchIngredientPrices,
    recipeShoppingFlow.

    Raises:
        HTTPException: 400 for an unknown action or invalid data
    """
    logger.info(f"Recipe action: {request.action}")
    try:
        if request.action == "findRecipeIngredients":
            data = FindRecipeIngredientsRequest.model_validate(request.data)
            return _dump(await find_recipe_ingredients(data, services))

        if request.action == "searchIngredientPrices":
            data = SearchIngredientPricesRequest.model_validate(request.data)
            return _dump(await search_ingredient_prices(data, services))

        if request.action == "recipeShoppingFlow":
            data = RecipeShoppingRequest.model_validate(request.data)
            return _dump(await recipe_shopping_flow(data, services))
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid data for {request.action}: {e.error_count()} validation errors"
        )

    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid action")


# ==================== Product Comparison ====================

@router.get("/products/search", response_model=List[CatalogProduct])
async def search_products(
    query: str = Query(..., min_length=1, max_length=100, description="Product search query"),
    services: AppServices = Depends(get_services),
) -> List[CatalogProduct]:
    """
    Search the aggregator catalogue across platforms.

    Raises:
        HTTPException: 400 for an invalid query, 502 if the aggregator fails
    """
    try:
        validate_search_query(query)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    outcome = await services.search_client.search_products(query.strip())
    if not outcome.ok:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Product search failed: {outcome.reason}"
        )
    return outcome.value


@router.post("/products/equivalency", response_model=ProductEquivalencyResult)
async def check_product_equivalency(
    request: ProductEquivalencyRequest,
    services: AppServices = Depends(get_services),
) -> ProductEquivalencyResult:
    """Decide whether two products from different platforms are the same item."""
    return await services.equivalency.check(request.product1, request.product2)


@router.post("/products/alternatives", response_model=ComparisonItem)
async def find_alternatives(
    request: FindAlternativesRequest,
    services: AppServices = Depends(get_services),
) -> ComparisonItem:
    """
    Find cheaper-first equivalent products for a cart item on all platforms.

    Searches the catalogue with the query (or the item name) and keeps
    products judged equivalent or similarly named.
    """
    query = (request.query or request.item.name).strip()
    try:
        validate_search_query(query)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    outcome = await services.search_client.search_products(query)
    if not outcome.ok:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Product search failed: {outcome.reason}"
        )
    return await services.equivalency.find_alternatives(request.item, outcome.value)


@router.post("/cart/savings", response_model=SavingsSuggestionResponse)
async def get_savings_suggestions(
    request: SavingsSuggestionRequest,
    services: AppServices = Depends(get_services),
) -> SavingsSuggestionResponse:
    """Suggest ways to save on a cart (empty list when unavailable)."""
    return await services.savings.get_savings_suggestions(request.cart_items)


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    """
    Initialize and configure the FastAPI application.

    Sets up:
    - Service wiring in the lifespan (GEMINI_API_KEY is required unless
      services are injected)
    - CORS middleware for frontend communication
    - Exception handlers for consistent error responses
    - Application metadata

    Args:
        services: Pre-built services (tests); built at startup when None

    Returns:
        FastAPI: Configured FastAPI application instance
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = services is None
        if owned:
            settings.require_llm_credentials()
            app.state.services = build_services()
        else:
            app.state.services = services
        logger.info("Savvy Cart API started")
        try:
            yield
        finally:
            if owned:
                await app.state.services.aclose()
            logger.info("Savvy Cart API stopped")

    app = FastAPI(
        title="Savvy Cart Recipe Shopping API",
        description="Recipe ingredient price comparison across quick-commerce platforms",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Configure CORS to allow frontend communication
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:3000"],  # Next / Vite dev servers
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handler for consistent error responses
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Handle all uncaught exceptions with consistent error format.

        Args:
            request: The incoming request object
            exc: The exception that was raised

        Returns:
            JSONResponse: Formatted error response
        """
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error occurred",
                "error": str(exc)
            }
        )

    app.include_router(router)
    return app


# Initialize FastAPI application (services are wired at startup)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    # Run the application
    # For development only - use uvicorn command in production
    uvicorn.run(
        "savvy_cart.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )
