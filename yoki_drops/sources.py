"""Indexer clients.

Each source turns one page request into a ``Page``. Transport problems,
non-200 answers and GraphQL ``errors`` become NetworkError (retried by
the driver); an answer without the fields we query for becomes
MalformedResponseError.
"""

import requests

from .config import (
    BLOCKSCOUT_API_URL,
    BLOCKSCOUT_GRAPHQL_URL,
    YOKI_CONTRACT,
    YOKI_GRAPH_STUDIO_URL,
    YOKI_SQUID_URL,
    YOKI_SUBGRAPH_URL,
    ZERO_ADDRESS,
)
from .errors import MalformedEventError, MalformedResponseError, NetworkError
from .events import TransferEvent
from .pagination import Page

JSON_HEADERS = {"Content-Type": "application/json"}


class _HttpSource:
    page_size = None
    descending = False

    def __init__(self, session=None, timeout=None):
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, url, params=None):
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"GET {url} failed: {e}") from e
        return self._json(response)

    def _post_graphql(self, url, query, variables):
        try:
            response = self.session.post(
                url,
                json={"query": query, "variables": variables},
                headers=JSON_HEADERS,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NetworkError(f"POST {url} failed: {e}") from e
        data = self._json(response)
        if data.get("errors"):
            raise NetworkError(f"GraphQL errors: {data['errors']}", response.status_code, data["errors"])
        if "data" not in data or data["data"] is None:
            raise MalformedResponseError(f"Unexpected response format: {data}")
        return data["data"]

    @staticmethod
    def _json(response):
        if response.status_code != 200:
            raise NetworkError(f"HTTP {response.status_code}", response.status_code, response.text)
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not JSON: {response.text[:200]}") from e
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Unexpected response format: {data!r}")
        return data


class BlockscoutRestSource(_HttpSource):
    """``/tokens/{contract}/instances/{id}/transfers``, newest first."""

    descending = True

    def __init__(self, contract=YOKI_CONTRACT, api_url=BLOCKSCOUT_API_URL, session=None, timeout=None):
        super().__init__(session, timeout)
        self.contract = contract
        self.api_url = api_url.rstrip("/")

    def fetch_page(self, token_id, cursor):
        url = f"{self.api_url}/tokens/{self.contract}/instances/{token_id}/transfers"
        data = self._get(url, params=cursor or None)
        if "items" not in data:
            raise MalformedResponseError(f"No items in response for token {token_id}")
        next_params = data.get("next_page_params")
        return Page(items=data["items"], next_cursor=next_params, has_next=next_params is not None)

    @staticmethod
    def parse_event(item):
        try:
            total = item.get("total") or {}
            return TransferEvent.create(
                from_address=(item.get("from") or {}).get("hash"),
                to_address=(item.get("to") or {}).get("hash"),
                token_id=total.get("token_id"),
                value=total.get("value"),
                timestamp=item.get("timestamp"),
            )
        except (AttributeError, TypeError) as e:
            raise MalformedEventError(f"Unexpected transfer shape: {item!r}") from e


BLOCKSCOUT_TRANSFERS_QUERY = """
query GetTokenTransfers($contract: AddressHash!, $tokenId: String!, $after: String, $filter: TokenTransferFilter) {
  erc1155Token(hash: $contract) {
    tokenTransfers(tokenIds: [$tokenId], filter: $filter, first: 50, after: $after) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        timestamp
        from {
          hash
        }
        to {
          hash
        }
        tokenId
        value
      }
    }
  }
}
"""


class BlockscoutGraphQLSource(_HttpSource):
    """Blockscout GraphQL ``tokenTransfers`` with cursor pagination."""

    def __init__(self, contract=YOKI_CONTRACT, url=BLOCKSCOUT_GRAPHQL_URL, cutoff_iso=None,
                 mints_only=False, session=None, timeout=None):
        super().__init__(session, timeout)
        self.contract = contract
        self.url = url
        self.cutoff_iso = cutoff_iso
        self.mints_only = mints_only

    def _filter(self):
        transfer_filter = {}
        if self.mints_only:
            transfer_filter["from"] = {"equalTo": ZERO_ADDRESS}
        if self.cutoff_iso:
            transfer_filter["timestamp"] = {"lessThan": self.cutoff_iso}
        return transfer_filter or None

    def fetch_page(self, token_id, cursor):
        data = self._post_graphql(self.url, BLOCKSCOUT_TRANSFERS_QUERY, {
            "contract": self.contract,
            "tokenId": str(token_id),
            "after": cursor,
            "filter": self._filter(),
        })
        token = data.get("erc1155Token")
        if not token:
            # Blockscout returns null for an id nobody ever minted.
            print(f"   No transfer data found for token {token_id}")
            return Page(items=[], has_next=False)
        try:
            transfers = token["tokenTransfers"]
            page_info = transfers["pageInfo"]
            return Page(
                items=transfers["nodes"],
                next_cursor=page_info.get("endCursor"),
                has_next=bool(page_info.get("hasNextPage")),
            )
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(f"Unexpected tokenTransfers shape for {token_id}: {e}") from e

    @staticmethod
    def parse_event(node):
        try:
            return TransferEvent.create(
                from_address=(node.get("from") or {}).get("hash", ZERO_ADDRESS),
                to_address=(node.get("to") or {}).get("hash"),
                token_id=node.get("tokenId"),
                value=node.get("value"),
                timestamp=node.get("timestamp"),
            )
        except (AttributeError, TypeError) as e:
            raise MalformedEventError(f"Unexpected transfer shape: {node!r}") from e


SUBGRAPH_TRANSFERS_QUERY = """
query GetTransferSingles($first: Int!, $skip: Int!, $blockTimestamp_lte: String!, $tokenId_gt: String!) {
  transferSingles(
    first: $first
    skip: $skip
    where: {blockTimestamp_lte: $blockTimestamp_lte, tokenId_gt: $tokenId_gt}
    orderBy: blockTimestamp
    orderDirection: asc
  ) {
    from
    to
    tokenId
    value
    blockTimestamp
    transactionHash
  }
}
"""


class SubgraphTransferSource(_HttpSource):
    """Season subgraph ``transferSingles``: every token id in one ascending feed."""

    def __init__(self, cutoff_ms, url=YOKI_SUBGRAPH_URL, min_token_id=13, page_size=1000,
                 session=None, timeout=None):
        super().__init__(session, timeout)
        self.url = url
        self.cutoff_ms = cutoff_ms
        self.min_token_id = min_token_id
        self.page_size = page_size

    def fetch_page(self, resource, cursor):
        skip = cursor or 0
        data = self._post_graphql(self.url, SUBGRAPH_TRANSFERS_QUERY, {
            "first": self.page_size,
            "skip": skip,
            "blockTimestamp_lte": str(self.cutoff_ms // 1000),
            "tokenId_gt": str(self.min_token_id),
        })
        if not isinstance(data.get("transferSingles"), list):
            raise MalformedResponseError(f"Unexpected response format: {data}")
        items = data["transferSingles"]
        return Page(items=items, next_cursor=skip + len(items))

    @staticmethod
    def parse_event(item):
        try:
            return TransferEvent.create(
                from_address=item.get("from"),
                to_address=item.get("to"),
                token_id=item.get("tokenId"),
                value=item.get("value"),
                timestamp=item.get("blockTimestamp"),
                timestamp_unit="s",
            )
        except (AttributeError, TypeError) as e:
            raise MalformedEventError(f"Unexpected transfer shape: {item!r}") from e


SEASON_INDEX_QUERY = """
query GetYokiPerSeasons($where: YokiPerSeasonWhereInput, $limit: Int!, $offset: Int!) {
  yokiPerSeasons(where: $where, limit: $limit, offset: $offset, orderBy: address_ASC) {
    address
    hasAll
    ownedYokis
  }
}
"""

SEASON_USER_QUERY = """
query GetYokiPerSeasonById($id: String!) {
  yokiPerSeasonById(id: $id) {
    address
    hasAll
    season
    ownedYokis
  }
}
"""


class SeasonIndexSource(_HttpSource):
    """Squid ``yokiPerSeasons`` rows for one season, offset pagination."""

    def __init__(self, url=YOKI_SQUID_URL, has_all_only=True, page_size=1000, session=None, timeout=None):
        super().__init__(session, timeout)
        self.url = url
        self.has_all_only = has_all_only
        self.page_size = page_size

    def fetch_page(self, season, cursor):
        offset = cursor or 0
        where = {"season_eq": int(season)}
        if self.has_all_only:
            where["hasAll_eq"] = True
        data = self._post_graphql(self.url, SEASON_INDEX_QUERY, {
            "where": where,
            "limit": self.page_size,
            "offset": offset,
        })
        rows = data.get("yokiPerSeasons")
        if not isinstance(rows, list):
            raise MalformedResponseError(f"Unexpected response format: {data}")
        return Page(items=rows, next_cursor=offset + len(rows))

    def fetch_user_row(self, address, season):
        """The indexer's row for one address, or None when it has none.

        Rows are keyed ``<address>_<season>``, so this explains why an
        address is missing from an export (wrong season, ``hasAll`` false).
        """
        row_id = f"{address.strip().lower()}_{int(season)}"
        data = self._post_graphql(self.url, SEASON_USER_QUERY, {"id": row_id})
        row = data.get("yokiPerSeasonById")
        if row is not None and not isinstance(row, dict):
            raise MalformedResponseError(f"Unexpected response format: {data}")
        return row


SEASON_CONDITIONS_QUERY = """
query GetSeasonConditions($first: Int!, $skip: Int!) {
  season%(season)dConditions_collection(
    where: {hasAllRequiredTokens: true}
    first: $first
    skip: $skip
    orderBy: lastUpdated
    orderDirection: desc
  ) {
    id
    address
  }
}
"""


class SeasonConditionsSource(_HttpSource):
    """Graph Studio ``season<N>Conditions_collection``: addresses holding every required token."""

    def __init__(self, url=YOKI_GRAPH_STUDIO_URL, page_size=1000, session=None, timeout=None):
        super().__init__(session, timeout)
        self.url = url
        self.page_size = page_size

    def fetch_page(self, season, cursor):
        skip = cursor or 0
        season = int(season)
        data = self._post_graphql(self.url, SEASON_CONDITIONS_QUERY % {"season": season}, {
            "first": self.page_size,
            "skip": skip,
        })
        rows = data.get(f"season{season}Conditions_collection")
        if not isinstance(rows, list):
            raise MalformedResponseError(f"Unexpected response format: {data}")
        return Page(items=rows, next_cursor=skip + len(rows))
