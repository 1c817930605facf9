"""
Deployment configuration for the fee router.

A config is read from a YAML document and may be overridden from the
environment:

    schema: fee_router/config/v1
    address: "0x..."          # the fee router's own account
    operator: "0x..."         # privileged operator principal
    fee_rate_bps: 10          # 0..500
    wrapped_native: "0x..."   # wrapped native-currency token
    native_asset: "0x00..00"  # optional, defaults to NATIVE_ASSET
    chain_id: "fee-router-local"

Environment overrides: FEE_ROUTER_FEE_BPS, FEE_ROUTER_OPERATOR, FEE_ROUTER_CHAIN_ID.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from ..core.collaborators import AssetTransfer, PairFactory, Router
from ..core.facade import FeeRouter
from ..core.fees import MAX_FEE_RATE
from ..state.balances import NATIVE_ASSET

CONFIG_SCHEMA = "fee_router/config/v1"
DEFAULT_CHAIN_ID = "fee-router-local"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class FeeRouterConfig:
    address: str
    operator: str
    wrapped_native: str
    fee_rate_bps: int = 0
    native_asset: str = NATIVE_ASSET
    chain_id: str = DEFAULT_CHAIN_ID

    def __post_init__(self) -> None:
        for name in ("address", "operator", "wrapped_native", "native_asset", "chain_id"):
            v = getattr(self, name)
            if not isinstance(v, str) or not v.strip():
                raise ConfigError(f"{name} must be a non-empty string")
        if not isinstance(self.fee_rate_bps, int) or isinstance(self.fee_rate_bps, bool):
            raise ConfigError("fee_rate_bps must be an int")
        if not (0 <= self.fee_rate_bps <= MAX_FEE_RATE):
            raise ConfigError(f"fee_rate_bps must be in [0, {MAX_FEE_RATE}]: {self.fee_rate_bps}")
        if self.wrapped_native == self.native_asset:
            raise ConfigError("wrapped_native must differ from native_asset")


def _require_mapping(value: Any, *, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigError(f"{name} must be a mapping")
    return value


def _require_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{name} must be a non-empty string")
    return value.strip()


def config_from_mapping(raw: Mapping[str, Any]) -> FeeRouterConfig:
    root = _require_mapping(raw, name="config")
    schema = _require_str(root.get("schema"), name="config.schema")
    if schema != CONFIG_SCHEMA:
        raise ConfigError(f"unsupported config.schema: {schema}")

    known = {"schema", "address", "operator", "fee_rate_bps", "wrapped_native", "native_asset", "chain_id"}
    unknown = sorted(set(root) - known)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(map(str, unknown))}")

    fee_rate = root.get("fee_rate_bps", 0)
    if not isinstance(fee_rate, int) or isinstance(fee_rate, bool):
        raise ConfigError("config.fee_rate_bps must be an int")

    return FeeRouterConfig(
        address=_require_str(root.get("address"), name="config.address"),
        operator=_require_str(root.get("operator"), name="config.operator"),
        wrapped_native=_require_str(root.get("wrapped_native"), name="config.wrapped_native"),
        fee_rate_bps=fee_rate,
        native_asset=_require_str(root.get("native_asset", NATIVE_ASSET), name="config.native_asset"),
        chain_id=_require_str(root.get("chain_id", DEFAULT_CHAIN_ID), name="config.chain_id"),
    )


def load_config(path: Union[str, Path]) -> FeeRouterConfig:
    raw = Path(path).read_text(encoding="utf-8")
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    return config_from_mapping(_require_mapping(doc, name="config"))


def config_from_env(base: FeeRouterConfig, env: Optional[Mapping[str, str]] = None) -> FeeRouterConfig:
    env = os.environ if env is None else env
    overrides: dict[str, Any] = {}

    raw_fee = env.get("FEE_ROUTER_FEE_BPS")
    if raw_fee is not None and raw_fee.strip():
        try:
            overrides["fee_rate_bps"] = int(raw_fee.strip(), 10)
        except ValueError as exc:
            raise ConfigError(f"FEE_ROUTER_FEE_BPS must be an integer: {raw_fee!r}") from exc

    operator = (env.get("FEE_ROUTER_OPERATOR") or "").strip()
    if operator:
        overrides["operator"] = operator

    chain_id = (env.get("FEE_ROUTER_CHAIN_ID") or "").strip()
    if chain_id:
        overrides["chain_id"] = chain_id

    return replace(base, **overrides) if overrides else base


def build_router(
    config: FeeRouterConfig,
    *,
    router: Router,
    factory: PairFactory,
    assets: AssetTransfer,
) -> FeeRouter:
    return FeeRouter(
        address=config.address,
        operator=config.operator,
        router=router,
        factory=factory,
        assets=assets,
        wrapped_native=config.wrapped_native,
        fee_rate=config.fee_rate_bps,
        native_asset=config.native_asset,
    )
