#!/usr/bin/env python
"""
Export pipeline - writes attar and perfume price lists (PDF + CSV).

Usage:
    python scripts/export_price_lists.py [output_dir]
"""
import sys
from datetime import datetime
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from scent_tool.config.settings import get_settings
from scent_tool.engine import PricingEngine
from scent_tool.services.records_service import ShopStores
from scent_tool.services.price_list_service import attar_price_frame, perfume_price_frame
from scent_tool.services.pdf_export import build_attar_price_list, build_perfume_price_list


def main():
    settings = get_settings()
    out_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else settings.data_dir / 'exports'
    out_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime('%Y%m%d')

    print("=" * 60)
    print("PRICE LIST EXPORT")
    print("=" * 60)
    print()

    engine = PricingEngine(settings)
    products = ShopStores.from_settings(settings).products.list_records()
    print(f"[1/3] Loaded {len(products)} products from {settings.products_path}")
    print(f"      Markup schedule: {settings.markup_schedule or 'default'}")

    print("[2/3] Writing PDFs...")
    attar_pdf = out_dir / f"attar_price_list_{stamp}.pdf"
    perfume_pdf = out_dir / f"perfume_price_list_{stamp}.pdf"
    attar_pdf.write_bytes(build_attar_price_list(products, settings))
    perfume_pdf.write_bytes(build_perfume_price_list(products, engine, settings))

    print("[3/3] Writing CSVs...")
    attar_frame = attar_price_frame(products)
    perfume_frame = perfume_price_frame(products, engine)
    attar_frame.to_csv(out_dir / f"attar_prices_{stamp}.csv", index=False)
    perfume_frame.to_csv(out_dir / f"perfume_prices_{stamp}.csv", index=False)

    priced = int(perfume_frame['No'].max()) if not perfume_frame.empty else 0
    print()
    print("=" * 60)
    print("✅ EXPORT COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Products: {len(products)}")
    print(f"  With perfume prices: {priced}")
    print(f"  Output: {out_dir}")


if __name__ == "__main__":
    main()
