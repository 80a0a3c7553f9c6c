import uvicorn

from fitscore.api.app import create_app
from fitscore.config.settings import Settings
from fitscore.database.connection import apply_schema, create_pool
from fitscore.ledger.report_ledger import build_ledger
from fitscore.logging.logger import Log
from fitscore.pipeline.pipeline import build_pipeline


def main() -> None:
    """Entry point: open pool -> apply schema -> build dependencies -> serve HTTP."""
    settings = Settings()
    Log.configure(settings.log_level)
    pool = create_pool(settings)

    try:
        apply_schema(pool)
        ledger = build_ledger(settings, pool)
        pipeline = build_pipeline(settings, ledger)
        app = create_app(pipeline, ledger, debug=settings.debug)
        Log.info(
            f"FitScore backend ({settings.app_env}) listening on {settings.host}:{settings.port}"
        )
        uvicorn.run(
            app,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
            log_config=None,
        )
    finally:
        pool.close()


if __name__ == "__main__":
    main()
