"""VClaim operation catalog and path resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from bpjs_relay.common.logging import get_logger

logger = get_logger(__name__)


class Operation(str, Enum):
    """Lookups the relay can forward."""

    PESERTA = "peserta"
    POLI = "poli"
    DOKTER = "dokter"
    STATUS_PULANG = "status-pulang"
    DIAGNOSA = "diagnosa"
    OBAT = "obat"
    RIWAYAT = "riwayat"
    RUJUKAN = "rujukan"


DEFAULT_OPERATION = Operation.PESERTA


@dataclass(frozen=True)
class EndpointSpec:
    """Path template plus display metadata for one operation."""

    template: str
    name: str
    description: str


ENDPOINTS: dict[Operation, EndpointSpec] = {
    Operation.PESERTA: EndpointSpec(
        "/Peserta/nokartu/{card_number}/tglSEP/{service_date}",
        "Get Peserta",
        "Data peserta BPJS berdasarkan nomor kartu",
    ),
    Operation.POLI: EndpointSpec(
        "/referensi/poli",
        "Get Poli",
        "Data referensi poli rumah sakit",
    ),
    Operation.DOKTER: EndpointSpec(
        "/referensi/dokter/{doctor_type}",
        "Get Dokter",
        "Data referensi dokter",
    ),
    Operation.STATUS_PULANG: EndpointSpec(
        "/referensi/statuspulang",
        "Get Status Pulang",
        "Referensi status pulang pasien",
    ),
    Operation.DIAGNOSA: EndpointSpec(
        "/referensi/diagnosa/{diagnosis_keyword}",
        "Get Diagnosa",
        "Data referensi diagnosa ICD-10",
    ),
    Operation.OBAT: EndpointSpec(
        "/referensi/obat/{drug_keyword}",
        "Get Obat",
        "Data referensi obat",
    ),
    Operation.RIWAYAT: EndpointSpec(
        "/Peserta/{card_number}/history",
        "Get Riwayat Kunjungan",
        "Riwayat kunjungan peserta",
    ),
    Operation.RUJUKAN: EndpointSpec(
        "/Rujukan/{card_number}",
        "Get Rujukan",
        "Data rujukan peserta",
    ),
}


@dataclass(frozen=True)
class EndpointParams:
    """Values substituted into path templates."""

    card_number: str = ""
    service_date: str = ""
    doctor_type: str = "1"
    diagnosis_keyword: str = "A00"
    drug_keyword: str = "paracetamol"


def parse_operation(key: str | Operation | None) -> Operation:
    """Map a logical key onto an Operation, falling back to peserta."""
    if isinstance(key, Operation):
        return key
    if key:
        try:
            return Operation(key)
        except ValueError:
            logger.warning(
                "Unknown endpoint key, using default",
                key=key,
                default=DEFAULT_OPERATION.value,
            )
    return DEFAULT_OPERATION


def resolve_path(key: str | Operation | None, params: EndpointParams) -> str:
    """Resolve an operation key to a concrete VClaim path."""
    spec = ENDPOINTS[parse_operation(key)]
    values = {
        "card_number": params.card_number,
        "service_date": params.service_date,
        "doctor_type": params.doctor_type,
        "diagnosis_keyword": params.diagnosis_keyword,
        "drug_keyword": params.drug_keyword,
    }
    return spec.template.format(**{k: quote(v, safe="") for k, v in values.items()})


def resolve_url(base_url: str, key: str | Operation | None, params: EndpointParams) -> str:
    """Join the service base URL and the resolved path."""
    return f"{base_url.rstrip('/')}{resolve_path(key, params)}"
