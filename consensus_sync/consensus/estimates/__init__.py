from .estimate_store import EstimateStore as EstimateStore
