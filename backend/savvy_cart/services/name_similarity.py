"""
Product name similarity.

Used when the LLM equivalency check is unavailable. With
USE_SEMANTIC_MATCHING enabled, names are compared with sentence-transformers
(all-MiniLM-L6-v2) so "Amul Taaza Toned Milk" and "Amul Toned Milk Pouch"
score as close; otherwise a cheap prefix test is used.
"""

import asyncio
import logging
import threading
from typing import Optional

import numpy as np

from savvy_cart.config import settings

logger = logging.getLogger(__name__)

# Lazy-loaded model
_model: Optional[object] = None
_model_lock = threading.Lock()

PREFIX_LENGTH = 5


def _get_model():
    """Lazy-load the sentence-transformers model (once, across worker threads)."""
    global _model
    if _model is not None:
        return _model
    with _model_lock:
        if _model is None:
            from sentence_transformers import SentenceTransformer
            _model = SentenceTransformer("sentence-transformers/all-MiniLM-L6-v2")
            logger.info("Name similarity model loaded (all-MiniLM-L6-v2)")
    return _model


def semantic_score(name_a: str, name_b: str) -> Optional[float]:
    """
    Semantic similarity of two product names on a 0-100 scale.

    Returns None if the model cannot be used.
    """
    try:
        model = _get_model()
        embeddings = model.encode([name_a, name_b], normalize_embeddings=True)
        cosine = float(np.dot(embeddings[0], embeddings[1]))
    except (OSError, RuntimeError, ValueError) as e:
        logger.warning(f"Semantic similarity failed: {e}")
        return None

    # Map [-1, 1] to [0, 100]
    return (cosine + 1) / 2 * 100


def prefix_match(item_name: str, candidate_name: str) -> bool:
    """True if the first five characters of item_name appear in candidate_name."""
    prefix = item_name.strip().lower()[:PREFIX_LENGTH]
    return bool(prefix) and prefix in candidate_name.lower()


async def names_look_similar(
    item_name: str,
    candidate_name: str,
    use_semantic: Optional[bool] = None,
    threshold: Optional[float] = None,
) -> bool:
    """
    Decide whether two product names describe the same kind of product.

    The semantic model runs in a worker thread; if it is disabled or
    fails, the prefix test decides.
    """
    use_semantic = settings.USE_SEMANTIC_MATCHING if use_semantic is None else use_semantic
    threshold = settings.SEMANTIC_MATCH_THRESHOLD if threshold is None else threshold

    if use_semantic:
        score = await asyncio.to_thread(semantic_score, item_name, candidate_name)
        if score is not None:
            logger.debug(f"Name similarity '{item_name}' vs '{candidate_name}': {score:.1f}")
            return score >= threshold

    return prefix_match(item_name, candidate_name)
