"""Tests for registry code models (SourceCode, TargetCode)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dualcode.models.codes import SourceCode, SourceSystem, TargetCode, TargetModule


class TestSourceCode:
    def test_storage_row_aliases(self) -> None:
        code = SourceCode.model_validate(
            {
                "id": "nam-001",
                "code": "AYU.RESP.001",
                "display": "Kasa",
                "system": "AYURVEDA",
                "description": "Cough due to Vata and Kapha imbalance",
                "icd11_mappings": ["TM40.00", "CA23"],
            }
        )
        assert code.system == SourceSystem.AYURVEDA
        assert code.mapped_target_codes == ["TM40.00", "CA23"]

    def test_camel_case_mapping_alias(self) -> None:
        code = SourceCode.model_validate(
            {
                "id": "nam-002",
                "code": "SID.GEN.004",
                "display": "Suram",
                "system": "SIDDHA",
                "icd11Mappings": ["TM40.10"],
            }
        )
        assert code.mapped_target_codes == ["TM40.10"]

    def test_system_is_uppercased(self) -> None:
        code = SourceCode(id="n1", code="UNA.DIG.002", display="Su-e-Hazm", system=" unani ")
        assert code.system == SourceSystem.UNANI

    def test_unknown_system_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SourceCode(id="n1", code="X.1", display="X", system="HOMEOPATHY")

    def test_null_description_and_mappings_default(self) -> None:
        code = SourceCode.model_validate(
            {
                "id": "n1",
                "code": "AYU.RESP.001",
                "display": "Kasa",
                "system": "AYURVEDA",
                "description": None,
                "icd11_mappings": None,
            }
        )
        assert code.description == ""
        assert code.mapped_target_codes == []

    def test_empty_code_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SourceCode(id="n1", code="", display="Kasa", system="AYURVEDA")

    def test_frozen(self) -> None:
        code = SourceCode(id="n1", code="AYU.RESP.001", display="Kasa", system="AYURVEDA")
        with pytest.raises(ValidationError):
            code.display = "Changed"  # type: ignore[misc]


class TestTargetCode:
    def test_module_parsed(self) -> None:
        code = TargetCode(id="icd-1", code="TM40.00", display="Cough disorder (TM2)", module="tm2")
        assert code.module == TargetModule.TM2

    def test_namaste_mapping_aliases(self) -> None:
        for key in ("namaste_mappings", "namasteMapping", "namaste_mapping"):
            code = TargetCode.model_validate(
                {
                    "id": "icd-2",
                    "code": "CA23",
                    "display": "Asthma",
                    "module": "BIOMEDICINE",
                    key: ["AYU.RESP.001"],
                }
            )
            assert code.mapped_source_codes == ["AYU.RESP.001"]

    def test_mappings_absent_is_none(self) -> None:
        code = TargetCode(id="icd-2", code="CA23", display="Asthma", module="BIOMEDICINE")
        assert code.mapped_source_codes is None
        assert code.description == ""

    def test_unknown_module_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TargetCode(id="icd-2", code="CA23", display="Asthma", module="CHAPTER26")
