"""
Decodificador de propiedades tipadas (formato de paginas Notion).

Convierte un documento anidado con propiedades etiquetadas por tipo
({"type": "select", "select": {...}}) en un mapping plano
nombre -> valor normalizado (str, numero, bool, lista o None).

La decodificacion tolera fallos parciales: una propiedad invalida
produce un string de diagnostico y nunca aborta el resto.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from loguru import logger

from tablesync.domain.entities.properties import PropertyTag, ROLLUP_ITEM_TAGS
from tablesync.shared.exceptions.domain import DecodeError, ValidationError
from tablesync.shared.utils.pagination import PageFetcher, resolve_relation


# Valores de diagnostico (contrato externo: se escriben tal cual en la tabla)
UNSUPPORTED_PROPERTY = "Unsupported property type"
UNSUPPORTED_FORMULA = "Unsupported formula type"
UNSUPPORTED_ROLLUP = "Unsupported rollup type"
INVALID_NUMBER = "Invalid number value"
MALFORMED_PROPERTY = "Malformed property value"

RelationFetcherFactory = Callable[[str, str], PageFetcher]


def _properties_of(document: Mapping[str, Any]) -> Mapping[str, Any]:
    """Acepta una pagina completa o directamente su mapping de propiedades."""
    props = document.get("properties")
    if isinstance(props, Mapping):
        return props
    return document


def _stringify(value: Any) -> str:
    """Representacion textual usada al unir items con comas."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class PropertyDecoder:
    """
    Decodificador de propiedades con despacho cerrado por PropertyTag.

    Uso:
        decoder = PropertyDecoder()
        fields = decoder.decode(page, ["Name", "Status"])
        everything = decoder.decode_all(page)
    """

    # Tabla de despacho: todo PropertyTag debe tener handler (ver chequeo al final).
    _HANDLERS: Dict[PropertyTag, str] = {
        PropertyTag.TITLE: "_decode_text",
        PropertyTag.RICH_TEXT: "_decode_text",
        PropertyTag.NUMBER: "_decode_number",
        PropertyTag.SELECT: "_decode_named_option",
        PropertyTag.MULTI_SELECT: "_decode_multi_select",
        PropertyTag.DATE: "_decode_date",
        PropertyTag.CHECKBOX: "_decode_checkbox",
        PropertyTag.STATUS: "_decode_named_option",
        PropertyTag.UNIQUE_ID: "_decode_unique_id",
        PropertyTag.FORMULA: "_decode_formula",
        PropertyTag.ROLLUP: "_decode_rollup",
        PropertyTag.RELATION: "_decode_relation_ids",
        PropertyTag.URL: "_decode_passthrough",
        PropertyTag.PEOPLE: "_decode_people",
        PropertyTag.CREATED_TIME: "_decode_passthrough",
        PropertyTag.LAST_EDITED_TIME: "_decode_passthrough",
    }

    def decode(self, document: Mapping[str, Any], names: Iterable[str]) -> Dict[str, Any]:
        """
        Decodifica solo las propiedades pedidas.

        Args:
            document: Pagina (con "properties") o mapping de propiedades
            names: Nombres de propiedad a extraer

        Returns:
            Dict[str, Any]: nombre -> valor; None si la propiedad no existe
        """
        props = _properties_of(document)
        result: Dict[str, Any] = {}
        for name in names:
            prop = props.get(name)
            result[name] = None if prop is None else self.decode_property(name, prop)
        return result

    def decode_all(
        self,
        document: Mapping[str, Any],
        *,
        resolve_relations: bool = False,
        relation_fetcher_factory: Optional[RelationFetcherFactory] = None,
    ) -> Dict[str, Any]:
        """
        Decodifica todas las propiedades presentes en el documento.

        Args:
            document: Pagina Notion
            resolve_relations: Si True, las relaciones se resuelven paginando
                (necesario cuando superan el limite inline de la API)
            relation_fetcher_factory: (page_id, property_id) -> page fetcher

        Raises:
            ValidationError: si se pide resolver relaciones sin factory o sin id de pagina
        """
        page_id = document.get("id")
        if resolve_relations:
            if relation_fetcher_factory is None:
                raise ValidationError(
                    "resolve_relations=True requiere relation_fetcher_factory",
                    field="relation_fetcher_factory",
                )
            if not page_id:
                raise ValidationError("El documento no tiene 'id' para resolver relaciones", field="id")

        props = _properties_of(document)
        result: Dict[str, Any] = {}
        for name, prop in props.items():
            if resolve_relations and self._tag_of(prop) is PropertyTag.RELATION:
                result[name] = self._resolve_relation(name, prop, page_id, relation_fetcher_factory)
            else:
                result[name] = self.decode_property(name, prop)
        return result

    def decode_property(self, name: str, prop: Mapping[str, Any]) -> Any:
        """
        Decodifica una propiedad, conteniendo cualquier fallo en un diagnostico.
        """
        tag = self._tag_of(prop)
        if tag is None:
            logger.debug(f"Propiedad '{name}' con tipo no soportado: {prop.get('type')!r}")
            return UNSUPPORTED_PROPERTY

        try:
            return self._dispatch(tag, prop)
        except DecodeError as e:
            logger.warning(f"Propiedad '{name}': {e.diagnostic}")
            return e.diagnostic
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Propiedad '{name}' ({tag.value}) mal formada: {e!r}")
            return MALFORMED_PROPERTY

    # ------------------------------------------------------------------
    # Despacho
    # ------------------------------------------------------------------

    @staticmethod
    def _tag_of(prop: Any) -> Optional[PropertyTag]:
        if not isinstance(prop, Mapping):
            return None
        return PropertyTag.lookup(prop.get("type"))

    def _dispatch(self, tag: PropertyTag, prop: Mapping[str, Any]) -> Any:
        handler = getattr(self, self._HANDLERS[tag])
        return handler(tag, prop)

    def _resolve_relation(
        self,
        name: str,
        prop: Mapping[str, Any],
        page_id: str,
        factory: RelationFetcherFactory,
    ) -> Any:
        property_id = prop.get("id")
        if not property_id:
            logger.warning(f"Relacion '{name}' sin id de propiedad; se usan los ids inline")
            return self.decode_property(name, prop)
        try:
            return resolve_relation(page_id, property_id, factory(page_id, property_id))
        except (DecodeError, KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning(f"Relacion '{name}' no resuelta ({e!r}); se usan los ids inline")
            return self.decode_property(name, prop)

    # ------------------------------------------------------------------
    # Handlers por tipo
    # ------------------------------------------------------------------

    def _decode_text(self, tag: PropertyTag, prop: Mapping[str, Any]) -> str:
        runs = prop[tag.value] or []
        return "".join(run.get("plain_text", "") for run in runs)

    def _decode_number(self, tag: PropertyTag, prop: Mapping[str, Any]) -> Optional[float]:
        raw = prop[tag.value]
        if raw is None:
            return None
        if isinstance(raw, bool):
            raise DecodeError(tag.value, INVALID_NUMBER, raw)
        if isinstance(raw, (int, float)):
            return raw
        try:
            return float(str(raw).strip())
        except ValueError:
            raise DecodeError(tag.value, INVALID_NUMBER, raw)

    def _decode_named_option(self, tag: PropertyTag, prop: Mapping[str, Any]) -> Optional[str]:
        option = prop[tag.value]
        return option.get("name") if option else None

    def _decode_multi_select(self, tag: PropertyTag, prop: Mapping[str, Any]) -> str:
        options = prop[tag.value] or []
        return ", ".join(o.get("name", "") for o in options)

    def _decode_date(self, tag: PropertyTag, prop: Mapping[str, Any]) -> Optional[str]:
        # Solo la fecha de inicio: el fin de un rango se descarta.
        value = prop[tag.value]
        return value.get("start") if value else None

    def _decode_checkbox(self, tag: PropertyTag, prop: Mapping[str, Any]) -> bool:
        return bool(prop[tag.value])

    def _decode_unique_id(self, tag: PropertyTag, prop: Mapping[str, Any]) -> Optional[int]:
        number = prop[tag.value].get("number")
        if number is not None and (isinstance(number, bool) or not isinstance(number, (int, float))):
            raise DecodeError(tag.value, INVALID_NUMBER, number)
        return number

    def _decode_formula(self, tag: PropertyTag, prop: Mapping[str, Any]) -> Any:
        formula = prop[tag.value]
        inner = formula.get("type")
        if inner in ("string", "number", "boolean"):
            return formula.get(inner)
        if inner == "date":
            value = formula.get("date")
            return value.get("start") if value else None
        return UNSUPPORTED_FORMULA

    def _decode_rollup(self, tag: PropertyTag, prop: Mapping[str, Any]) -> str:
        rollup = prop[tag.value]
        if rollup.get("type") != "array":
            return UNSUPPORTED_ROLLUP

        parts: List[str] = []
        for item in rollup.get("array") or []:
            item_tag = self._tag_of(item)
            if item_tag not in ROLLUP_ITEM_TAGS:
                parts.append(UNSUPPORTED_PROPERTY)
                continue
            parts.append(_stringify(self._dispatch(item_tag, item)))
        return ", ".join(parts)

    def _decode_relation_ids(self, tag: PropertyTag, prop: Mapping[str, Any]) -> List[str]:
        return [r["id"] for r in prop[tag.value] or [] if r.get("id")]

    def _decode_people(self, tag: PropertyTag, prop: Mapping[str, Any]) -> List[str]:
        return [p.get("name") or p.get("id") for p in prop[tag.value] or []]

    def _decode_passthrough(self, tag: PropertyTag, prop: Mapping[str, Any]) -> Any:
        return prop.get(tag.value)


_missing_handlers = set(PropertyTag) - set(PropertyDecoder._HANDLERS)
if _missing_handlers:
    raise RuntimeError(
        f"PropertyDecoder sin handler para: {sorted(t.value for t in _missing_handlers)}"
    )
