"""
Interfaz del backend de almacenamiento tabular.
Define el contrato que debe cumplir cualquier implementación.

Convenciones:
- Los numeros de fila son 1-based y no cuentan el header.
- Las columnas se direccionan por indice 0-based dentro del esquema.
"""
from abc import ABC, abstractmethod
from typing import List, Mapping, Sequence

from tablesync.domain.entities.table import Cell


class ITableBackend(ABC):
    """
    Interfaz del backend tabular.
    Define las operaciones de persistencia de tablas, filas y celdas.
    """
    
    @abstractmethod
    def table_exists(self, name: str) -> bool:
        """Indica si existe una tabla con ese nombre."""
        pass
    
    @abstractmethod
    def create_table(self, name: str, headers: Sequence[str]) -> None:
        """
        Crea una tabla vacia con la fila de headers congelada y en negrita.
        
        Args:
            name: Nombre unico de la tabla
            headers: Headers ordenados
        """
        pass
    
    @abstractmethod
    def read_headers(self, name: str) -> List[str]:
        """Retorna la fila de headers persistida."""
        pass
    
    @abstractmethod
    def read_rows(self, name: str) -> List[List[Cell]]:
        """
        Retorna un snapshot de todas las filas de datos, en orden.
        
        Returns:
            List[List[Cell]]: Celdas alineadas 1:1 con los headers
        """
        pass
    
    @abstractmethod
    def insert_row(self, name: str, row_number: int, cells: Sequence[Cell]) -> None:
        """
        Inserta una fila para que quede en `row_number`; las filas
        siguientes se desplazan hacia abajo.
        
        La fila nueva hereda la altura de la fila inmediatamente superior,
        igual que al insertar en una hoja de calculo.
        """
        pass
    
    @abstractmethod
    def update_cells(self, name: str, row_number: int, updates: Mapping[int, Cell]) -> None:
        """
        Reemplaza celdas de una fila existente.
        
        Args:
            name: Nombre de la tabla
            row_number: Fila 1-based
            updates: indice de columna -> celda nueva
        """
        pass
    
    @abstractmethod
    def get_row_height(self, name: str, row_number: int) -> int:
        """Altura actual de una fila."""
        pass
    
    @abstractmethod
    def set_row_height(self, name: str, row_number: int, height: int) -> None:
        """Fija la altura de una fila."""
        pass
    
    @abstractmethod
    def default_row_height(self, name: str) -> int:
        """Altura por defecto de las filas de la tabla."""
        pass
