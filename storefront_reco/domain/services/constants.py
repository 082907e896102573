# Constants for the recommendation engine.
# Weights and limits are empirical; they are named here so they are not magic numbers.

# Fallback scorer weights
CATEGORY_MATCH_WEIGHT = 3.0
BRAND_MATCH_WEIGHT = 2.0
NAME_JACCARD_WEIGHT = 3.0
DESCRIPTION_JACCARD_WEIGHT = 1.0
PRICE_AFFINITY_WEIGHT = 2.0

# Candidate pool
CANDIDATE_POOL_LIMIT = 150  # Max products loaded for fallback scoring
MIN_POOL_SIZE = 5  # Below this, a category-filtered pool is widened to the whole catalog

# Extra neighbours requested from the vector store to absorb self/missing matches
VECTOR_QUERY_BUFFER = 3

# Default result sizes of the public entry points
DEFAULT_SIMILAR_LIMIT = 5
DEFAULT_GROUP_LIMIT = 10
MAX_LIMIT = 50
