"""
CLI 명령어 처리 모듈

    landed-cost calc --value 100 --quantity 10 --origin US --destination CN \\
        --category Electronics --hs-code 8517.62 --weight 5 --dimensions 20x20x10

- 플래그 또는 JSON 파일(--input) 입력
- Rich 테이블 출력, --json 이면 JSON 출력
- 종료 코드: 0 성공, 1 계산/설정 오류, 2 입력 오류
"""

import argparse
import json
import sys
from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.config import get_settings
from ..core.exceptions import LandedCostError, ValidationError
from ..core.logging import setup_logger
from ..domain.models import (
    CostCalculationResult,
    Dimensions,
    PackageType,
    ProductDetails,
    ShipmentType,
    ShippingDetails,
    TransportMode,
)
from ..factory import create_calculator
from ..utils.helpers import format_currency, format_percent

VERSION = "1.0.0"

EXIT_OK = 0
EXIT_CALCULATION_ERROR = 1
EXIT_VALIDATION_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """CLI 파서 생성"""
    parser = argparse.ArgumentParser(
        prog="landed-cost",
        description="International shipment landed cost calculator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
  # 플래그 입력
  %(prog)s calc --value 100 --quantity 10 --origin US --destination CN \\
      --category Electronics --hs-code 8517.62 --weight 5 --dimensions 20x20x10

  # JSON 파일 입력, JSON 출력
  %(prog)s calc --input shipment.json --json
"""
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="상세 로그 출력"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {VERSION}"
    )

    subparsers = parser.add_subparsers(dest="command", help="사용 가능한 명령어")

    # calc 커맨드 (도착원가 계산)
    calc_parser = subparsers.add_parser("calc", help="도착원가 계산")
    calc_parser.add_argument("--input", type=str, help="입력 JSON 파일 ({\"product\": ..., \"shipping\": ...})")
    calc_parser.add_argument("--json", action="store_true", help="결과를 JSON으로 출력")

    product_group = calc_parser.add_argument_group("product")
    product_group.add_argument("--value", type=float, help="단가")
    product_group.add_argument("--description", default="", help="상품 설명")
    product_group.add_argument("--category", default="", help="상품 카테고리 (예: Electronics)")
    product_group.add_argument("--hs-code", default="", help="HS 코드")
    product_group.add_argument("--origin", help="원산지 국가 코드")
    product_group.add_argument("--destination", help="도착지 국가 코드")

    shipping_group = calc_parser.add_argument_group("shipping")
    shipping_group.add_argument("--quantity", type=int, default=1, help="수량 (기본: 1)")
    shipping_group.add_argument(
        "--mode",
        choices=[m.value for m in TransportMode],
        default=TransportMode.AIR.value,
        help="운송 수단"
    )
    shipping_group.add_argument(
        "--shipment-type",
        choices=[s.value for s in ShipmentType],
        default=ShipmentType.LCL.value,
        help="화물 형태"
    )
    shipping_group.add_argument(
        "--package-type",
        choices=[p.value for p in PackageType],
        default=PackageType.CARDBOARD_BOX.value,
        help="포장 형태"
    )
    shipping_group.add_argument("--weight", type=float, help="실무게 (kg)")
    shipping_group.add_argument("--dimensions", type=parse_dimensions, help="포장 크기 '가로x세로x높이'")
    shipping_group.add_argument("--unit", default="cm", help="치수 단위 (cm, mm, m, in)")

    return parser


def parse_dimensions(dims_str: str) -> Tuple[float, float, float]:
    """포장 크기 문자열 파싱 ("50x40x30")"""
    parts = dims_str.lower().replace(" ", "").split("x")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected LxWxH, got '{dims_str}'")
    try:
        return tuple(float(p) for p in parts)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid dimensions '{dims_str}'") from e


def load_input_file(path: str) -> Tuple[ProductDetails, ShippingDetails]:
    """JSON 입력 파일 로드

    Raises:
        ValidationError: 파일이 없거나 형식이 잘못되었을 때
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ValidationError(f"Input file not found: {path}", field="input", value=path) from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Input file is not valid JSON: {e}", field="input", value=path) from e

    if not isinstance(data, dict) or not isinstance(data.get("product"), dict) \
            or not isinstance(data.get("shipping"), dict):
        raise ValidationError(
            "Input file must contain 'product' and 'shipping' objects",
            field="input",
            value=path,
        )

    return ProductDetails.from_dict(data["product"]), ShippingDetails.from_dict(data["shipping"])


def build_inputs(args: argparse.Namespace) -> Tuple[ProductDetails, ShippingDetails]:
    """플래그 또는 파일에서 계산 입력 생성"""
    if args.input:
        return load_input_file(args.input)

    product = ProductDetails(
        description=args.description,
        category=args.category,
        hs_code=args.hs_code,
        origin_country=args.origin,
        destination_country=args.destination,
        value=args.value,
    )
    dimensions = None
    if args.dimensions:
        length, width, height = args.dimensions
        dimensions = Dimensions(length=length, width=width, height=height, unit=args.unit)

    shipping = ShippingDetails(
        quantity=args.quantity,
        transport_mode=args.mode,
        shipment_type=args.shipment_type,
        package_type=args.package_type,
        weight=args.weight,
        dimensions=dimensions,
    )
    return product, shipping


def render_result(result: CostCalculationResult, console: Console):
    """Rich 테이블로 결과 출력"""
    breakdown = result.breakdown

    table = Table(title="Landed Cost Breakdown")
    table.add_column("Component")
    table.add_column("Amount", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Category")

    for component in result.components:
        table.add_row(
            escape(component.name),
            format_currency(component.value),
            format_percent(component.percentage),
            component.category.value,
        )
    table.add_section()
    table.add_row("Total Landed Cost", format_currency(breakdown.total_landed_cost), "100.0%", "")

    console.print(table)
    console.print(f"Duty rate source: {escape(breakdown.data_source)}")
    if result.duty_description:
        console.print(f"  {escape(result.duty_description)}")
    console.print(f"Freight source: {escape(breakdown.shipping_source)}")
    if result.shipping_quote:
        quote = result.shipping_quote
        console.print(
            f"  {escape(quote.carrier)} / {escape(quote.service)} / {escape(quote.delivery_time)}"
        )


def cmd_calc(args: argparse.Namespace, console: Console, err_console: Console) -> int:
    """도착원가 계산 명령어 실행"""
    try:
        product, shipping = build_inputs(args)
        calculator = create_calculator(config=get_settings())
        result = calculator.calculate_costs(product, shipping)
    except ValidationError as e:
        err_console.print(f"[red]Invalid input:[/red] {escape(e.message)}")
        return EXIT_VALIDATION_ERROR
    except LandedCostError as e:
        err_console.print(f"[red]Calculation failed:[/red] {escape(str(e))}")
        return EXIT_CALCULATION_ERROR

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        render_result(result, console)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """CLI 진입점"""
    parser = create_parser()
    args = parser.parse_args(argv)

    level = "DEBUG" if args.verbose else get_settings().log_level
    setup_logger("landed_cost", level)

    console = Console()
    err_console = Console(stderr=True)

    if args.command == "calc":
        return cmd_calc(args, console, err_console)

    # 명령어 없으면 도움말
    parser.print_help()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
