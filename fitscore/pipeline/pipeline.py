from fitscore.analysis.factory import InferenceClientFactory
from fitscore.analysis.invoker import AnalysisInvoker
from fitscore.analysis.normalizer import Normalizer
from fitscore.config.settings import Settings
from fitscore.ledger.report_ledger import ReportLedger
from fitscore.logging.logger import Log
from fitscore.pipeline.gateway import IngestionGateway
from fitscore.pipeline.models import PipelineResult, UploadRequest
from fitscore.storage.local_adapter import LocalBlobStore


class ReportPipeline:
    """Orchestrates one upload: store -> analyze -> record.

    ValidationError and StorageError from the gateway abort the run; every
    later stage degrades instead of failing.
    """

    def __init__(
        self,
        gateway: IngestionGateway,
        invoker: AnalysisInvoker,
        ledger: ReportLedger,
    ) -> None:
        self._gateway = gateway
        self._invoker = invoker
        self._ledger = ledger

    async def run(self, upload: UploadRequest) -> PipelineResult:
        stored = await self._gateway.store(upload)
        outcome = await self._invoker.analyze(stored)
        report_id = await self._ledger.record(
            stored.user_id, outcome=outcome, stored=stored
        )
        Log.info(
            f"Pipeline finished for {stored.key}: {outcome.status}, "
            f"score {outcome.report.score}, report {report_id}"
        )
        return PipelineResult(stored=stored, outcome=outcome, report_id=report_id)


def build_pipeline(settings: Settings, ledger: ReportLedger) -> ReportPipeline:
    """Build a ReportPipeline with all required adapters."""
    blob_store = LocalBlobStore(settings.files_root)
    client = InferenceClientFactory.create(settings, blob_reader=blob_store.read)
    gateway = IngestionGateway(
        blob_store=blob_store,
        timeout_seconds=settings.blob_write_timeout_seconds,
    )
    invoker = AnalysisInvoker(
        client=client,
        normalizer=Normalizer(),
        timeout_seconds=settings.inference_timeout_seconds,
    )
    return ReportPipeline(gateway=gateway, invoker=invoker, ledger=ledger)
