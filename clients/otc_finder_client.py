import requests
from typing import Optional, Dict, Any, List

class OtcFinderClient:
    def __init__(self, base_url: str, api_key: str):
        self.base_url = base_url.rstrip("/")
        self.headers = {"X-Api-Key": api_key, "Content-Type": "application/json"}

    def search(self, query: str, *, source_country: Optional[str]=None,
               destination_countries: Optional[List[str]]=None, limit: Optional[int]=None,
               timeout:int=30) -> Dict[str,Any]:
        payload: Dict[str, Any] = {"query": query}
        if source_country: payload["source_country"] = source_country
        if destination_countries: payload["destination_countries"] = list(destination_countries)
        if limit: payload["limit"] = limit
        r = requests.post(f"{self.base_url}/v1/search", json=payload, headers=self.headers, timeout=timeout)
        r.raise_for_status(); return r.json()

    def suggestions(self, q: str, *, limit: int=10, timeout:int=15) -> List[Dict[str,Any]]:
        r = requests.get(f"{self.base_url}/v1/suggestions", params={"q": q, "limit": limit},
                         headers=self.headers, timeout=timeout)
        r.raise_for_status(); return r.json().get("items", [])

    def availability(self, name: str, country: str, timeout:int=15) -> str:
        r = requests.get(f"{self.base_url}/v1/availability", params={"name": name, "country": country},
                         headers=self.headers, timeout=timeout)
        r.raise_for_status(); return r.json()["availability"]

    def interactions(self, name: str, timeout:int=15) -> List[str]:
        r = requests.get(f"{self.base_url}/v1/interactions/{requests.utils.quote(name)}",
                         headers=self.headers, timeout=timeout)
        r.raise_for_status(); return r.json().get("interactions", [])

    def status(self, timeout:int=10) -> Dict[str,Any]:
        r = requests.get(f"{self.base_url}/v1/status", headers=self.headers, timeout=timeout)
        r.raise_for_status(); return r.json()
