"""
Catalog import service.

Joins a spreadsheet of product names against a ZIP of product photos by
filename and writes the resulting products to the catalog.

Flow:
    parse_product_names + index_image_archive
        -> match_products (tags every product with the pending batch code)
        -> confirmation check (archive given, names given, nothing matched)
        -> BatchIngestWriter (sequential chunks, progress after each)
        -> BatchCodeCounter.advance()

A failing chunk stops the import. Chunks already written stay in the
catalog; there is no rollback.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4
import structlog

from config import get_supabase_client, settings
from exceptions import (
    EmptyImportError,
    ImportConfirmationRequiredError,
    MissingCompanyNameError,
    RemoteWriteError,
)
from models.catalog_import import ImportPreview, ImportResult
from parsers.image_archive import ImageIndex, index_image_archive
from parsers.product_list_parser import parse_product_names
from services.product_service import ProductService, next_batch_code
from utils.text_utils import clean_name

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[int, int], None]
ConfirmCallback = Callable[[ImportPreview], bool]


@dataclass
class MatchResult:
    """Products built from parsed names, with image match stats."""
    products: list[dict] = field(default_factory=list)
    matched_count: int = 0
    unmatched_names: list[str] = field(default_factory=list)


class BatchCodeCounter:
    """
    Tracks the batch code of the pending import.

    Seeded from the highest code in the catalog; advanced once per
    fully successful import.
    """

    def __init__(self, last_code: str = "0000"):
        self.last_code = last_code

    @property
    def pending(self) -> str:
        """Code the next import will be tagged with."""
        return next_batch_code(self.last_code)

    def advance(self) -> str:
        """Mark the pending code as used; return the new pending code."""
        self.last_code = self.pending
        return self.pending


# ===================
# MATCHING
# ===================

def match_products(
    names: list[str],
    images: ImageIndex,
    company_name: str,
    batch_code: str,
) -> MatchResult:
    """
    Build catalog rows for parsed names.

    Each name resolves its image by exact key, then lower-cased key,
    else None. Duplicated names produce duplicated products.

    Raises:
        MissingCompanyNameError: If company_name is blank
    """
    company = clean_name(company_name)
    if not company:
        raise MissingCompanyNameError()

    now = datetime.now(timezone.utc).isoformat()
    result = MatchResult()

    for name in names:
        image = images.lookup(name)
        if image:
            result.matched_count += 1
        else:
            result.unmatched_names.append(name)

        result.products.append({
            "id": str(uuid4()),
            "name": name,
            "image_url": image,
            "company_name": company,
            "batch_code": batch_code,
            "created_at": now,
        })

    return result


def requires_confirmation(images: ImageIndex, match: MatchResult) -> bool:
    """
    True when an archive was uploaded, names were parsed, and no image matched.

    That pattern usually means filenames follow a different convention than
    the spreadsheet, so the user has to approve importing without photos.
    """
    return (
        images.archive_supplied
        and len(match.products) > 0
        and match.matched_count == 0
    )


# ===================
# WRITING
# ===================

class BatchIngestWriter:
    """
    Sequential chunked insert into the products table.

    Each chunk waits for its round-trip before the next is sent.
    """

    def __init__(self, db, table: str = "products", chunk_size: int = 1):
        self.db = db
        self.table = table
        self.chunk_size = chunk_size

    def write(
        self,
        records: list[dict],
        on_progress: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Insert records chunk by chunk.

        Args:
            records: Product rows
            on_progress: Called with cumulative (completed, total)

        Returns:
            Number of records written

        Raises:
            RemoteWriteError: On the first failing chunk. Earlier chunks
                are already committed; details carry completed/total.
        """
        total = len(records)
        completed = 0

        for start in range(0, total, self.chunk_size):
            chunk = records[start:start + self.chunk_size]
            try:
                self.db.table(self.table).insert(chunk).execute()
            except Exception as e:
                logger.error(
                    "import_chunk_failed",
                    start=start,
                    completed=completed,
                    total=total,
                    error=str(e)
                )
                raise RemoteWriteError(
                    "insert",
                    str(e),
                    details={"completed": completed, "total": total}
                )

            completed = min(start + self.chunk_size, total)
            logger.debug("import_chunk_written", completed=completed, total=total)
            if on_progress:
                on_progress(completed, total)

        return completed


# ===================
# ORCHESTRATION
# ===================

class CatalogImportService:
    """
    Catalog import business logic.

    Parses, matches, checks, writes. Validation and parse errors are raised
    before any network call.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"
        self.products = ProductService()

    def _prepare(
        self,
        company_name: str,
        spreadsheet: bytes,
        spreadsheet_filename: Optional[str],
        archive: Optional[bytes],
    ) -> tuple[BatchCodeCounter, ImageIndex, MatchResult, ImportPreview]:
        if not clean_name(company_name):
            raise MissingCompanyNameError()

        names = parse_product_names(spreadsheet, spreadsheet_filename)
        if not names:
            raise EmptyImportError()

        images = index_image_archive(archive)

        counter = BatchCodeCounter(self.products.get_last_batch_code())
        match = match_products(names, images, company_name, counter.pending)

        preview = ImportPreview(
            company_name=clean_name(company_name),
            batch_code=counter.pending,
            product_count=len(match.products),
            image_count=images.image_count,
            matched_count=match.matched_count,
            unmatched_names=match.unmatched_names,
            requires_confirmation=requires_confirmation(images, match),
        )

        logger.info(
            "import_matched",
            batch_code=counter.pending,
            products=preview.product_count,
            images=preview.image_count,
            matched=preview.matched_count,
        )
        return counter, images, match, preview

    def preview(
        self,
        company_name: str,
        spreadsheet: bytes,
        spreadsheet_filename: Optional[str] = None,
        archive: Optional[bytes] = None,
    ) -> ImportPreview:
        """Parse and match without writing anything."""
        _, _, _, preview = self._prepare(
            company_name, spreadsheet, spreadsheet_filename, archive
        )
        return preview

    def run_import(
        self,
        company_name: str,
        spreadsheet: bytes,
        spreadsheet_filename: Optional[str] = None,
        archive: Optional[bytes] = None,
        confirm: Optional[ConfirmCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImportResult:
        """
        Import a product spreadsheet and optional image archive.

        Args:
            company_name: Company every imported product belongs to
            spreadsheet: Spreadsheet bytes with a "Product Name" column
            spreadsheet_filename: Upload name (detects CSV)
            archive: ZIP of images named after products
            confirm: Asked when images were uploaded but none matched;
                returning False (or no callback) aborts with nothing written
            on_progress: Called with (completed, total) after each chunk

        Returns:
            ImportResult with the used and next batch codes

        Raises:
            ValidationError / ParseError: Before any write
            ImportConfirmationRequiredError: Confirmation declined
            RemoteWriteError: A chunk failed; earlier chunks stay written
        """
        logger.info("products_import_started", company_name=company_name)

        counter, images, match, preview = self._prepare(
            company_name, spreadsheet, spreadsheet_filename, archive
        )

        if preview.requires_confirmation:
            if confirm is None or not confirm(preview):
                logger.warning(
                    "products_import_declined",
                    batch_code=preview.batch_code,
                    products=preview.product_count,
                    images=preview.image_count,
                )
                raise ImportConfirmationRequiredError(
                    preview.product_count, preview.image_count
                )

        writer = BatchIngestWriter(
            self.db, self.table, chunk_size=settings.import_chunk_size
        )
        written = writer.write(match.products, on_progress)

        batch_code = counter.pending
        counter.advance()

        logger.info(
            "products_import_completed",
            batch_code=batch_code,
            written=written,
            next_batch_code=counter.pending,
        )

        return ImportResult(
            batch_code=batch_code,
            next_batch_code=counter.pending,
            products_written=written,
            total=len(match.products),
            image_count=images.image_count,
            matched_count=match.matched_count,
            message=f"Successfully uploaded {written} products for batch {batch_code}",
        )


# Singleton instance
_service: Optional[CatalogImportService] = None


def get_catalog_import_service() -> CatalogImportService:
    """Get or create CatalogImportService instance."""
    global _service
    if _service is None:
        _service = CatalogImportService()
    return _service
