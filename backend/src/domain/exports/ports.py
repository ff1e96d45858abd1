"""BAQ Query Port - Domain interface for running ERP business activity queries.

Architecture: Hexagonal - Port interface in domain layer, implemented by
infrastructure.erp.client.EpicorRestClient.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional


class BAQQueryPort(ABC):
    """Port interface for tabular ERP queries."""

    @abstractmethod
    def get_baq_results(
        self,
        baq_id: str,
        parameters: Optional[Mapping[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        """Run a BAQ and return its rows.

        Args:
            baq_id: Query identifier as defined in the ERP
            parameters: Optional BAQ parameters (e.g. {"LastChange": "..."})

        Returns:
            Rows as column name → value dicts, in server order
        """
        pass
