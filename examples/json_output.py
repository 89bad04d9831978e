"""
Demo: JSON Output

Shows the JSON output for a set of real pharmacy scans, classified with
the bundled provider rules.
"""

from datetime import datetime, timezone

from gs1_scanlog import load_rules
from gs1_scanlog.formatters import scan_to_dict, scan_to_json


def demo_json_output():
    """Print JSON output for scans with and without separators."""

    print("=" * 80)
    print("  JSON OUTPUT DEMO")
    print("=" * 80)

    rules = load_rules()
    now = datetime.now(timezone.utc)

    scans = [
        ("Standard pharma pack", "01062867400002491728043010GB2C2171490437969853"),
        ("Short lot code", "01062850960028771726033110HN8X2172869453519267"),
        ("Date-like text inside serial", "01062911037315552164SSI54CE688QZ1727021410C601"),
        ("Internal AI lookalike in lot", "010622300001036517270903103056442130564439945626"),
        ("Unknown day (DD=00)", "010625115902606717290400104562202106902409792902"),
        ("Separated scan", "]d20184111110000018\x1d10B55555\x1d17300101"),
        ("Plain text label", "SAI shipment 42"),
    ]

    for title, barcode in scans:
        print(f"\n{title}")
        print("-" * 80)
        print(f"Input: {barcode!r}")
        print(scan_to_json(barcode, now=now, rules=rules))

    print("\n\n" + "=" * 80)
    print("  FIELD EXTRACTION EXAMPLE")
    print("=" * 80)

    barcode = "01062867400002491728043010GB2C2171490437969853"
    data = scan_to_dict(barcode, now=now, rules=rules)

    print(f"\nBarcode: {barcode}")
    print(f"  GTIN:     {data['GTIN Code']}")
    print(f"  Expiry:   {data['Expiry Date']}")
    print(f"  Batch:    {data['Batch/Lot Number']}")
    print(f"  Serial:   {data['Serial Number']}")
    print(f"  Provider: {data['Provider']}")


if __name__ == "__main__":
    demo_json_output()
