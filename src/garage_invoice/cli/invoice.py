from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from garage_invoice.config import get_settings
from garage_invoice.errors import InvoiceError
from garage_invoice.models import BuyerInfo
from garage_invoice.services import Mailer, generate_invoice
from garage_invoice.utils.log import setup_logging


BUYER_OPTIONS = {
    "name": "--buyer-name",
    "company": "--buyer-company",
    "address1": "--buyer-address1",
    "address2": "--buyer-address2",
    "city_state_zip": "--buyer-city-state-zip",
    "phone": "--buyer-phone",
    "email": "--buyer-email",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a PDF invoice for a listing URL")
    parser.add_argument("url", help="Listing URL, e.g. https://www.shopgarage.com/listing/<slug>-<uuid>")
    parser.add_argument("-o", "--output", type=Path, default=Path("invoice.pdf"), help="Where to write the PDF")
    for field, flag in BUYER_OPTIONS.items():
        parser.add_argument(flag, dest=f"buyer_{field}", default=None)
    parser.add_argument("--email-to", default=None, help="Also email the invoice to this address")
    parser.add_argument("--subject", default=None)
    parser.add_argument("--message", default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging("DEBUG" if args.verbose else settings.log_level)

    buyer = {field: getattr(args, f"buyer_{field}") for field in BUYER_OPTIONS}
    buyer_info = BuyerInfo(**buyer) if any(buyer.values()) else None
    try:
        invoice = generate_invoice(args.url, buyer_info, settings=settings)
        args.output.write_bytes(invoice.pdf)
        print(f"Wrote {invoice.invoice_number} to {args.output}")
        if args.email_to:
            Mailer(settings).send_invoice(args.email_to, invoice.pdf, subject=args.subject, message=args.message)
            print(f"Emailed invoice to {args.email_to}")
    except (InvoiceError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
