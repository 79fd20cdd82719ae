from .settings import DEFAULT_SETTINGS, PROVIDER_NAME, REQUIRED_CATALOG_ENV_VARS, SEED_STRATEGIES
