"""
The ENGINE layer: ray casting, hit deduplication, placement and the batch loop.
It depends only on the model layer and on the protocols in `interfaces`.
"""
