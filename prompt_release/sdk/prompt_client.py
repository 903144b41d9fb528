import logging
import os
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class PromptClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        actor: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the Prompt Release Client"""
        self.base_url = base_url.rstrip('/')
        self.actor = actor or os.getenv("PROMPT_RELEASE_ACTOR")
        self.timeout = timeout
        self.session = session or requests.Session()

        # Configure session headers
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json"
        }

        if self.actor:
            headers["X-Actor"] = self.actor

        self.session.headers.update(headers)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}/api/v1{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get_active(self, prompt_id: str, env: str = "prod") -> Dict[str, Any]:
        """Get the version currently published to an environment"""
        return self._request("GET", f"/prompts/{prompt_id}/active", params={"env": env})

    def render(self, prompt_id: str, variables: Optional[Dict[str, Any]] = None,
               env: str = "prod") -> str:
        """Render the active version of a prompt and return the text"""
        result = self._request(
            "POST",
            f"/prompts/{prompt_id}/render",
            params={"env": env},
            json={"variables": variables or {}},
        )
        return result["content"]

    def create_version(self, prompt_id: str, content: Optional[str] = None,
                       base_version_id: Optional[str] = None, **fields) -> Dict[str, Any]:
        """Create a new version; fields not given are inherited from the base version"""
        data = {"content": content, "base_version_id": base_version_id}
        data.update(fields)
        payload = {key: value for key, value in data.items() if value is not None}
        return self._request("POST", f"/prompts/{prompt_id}/versions", json=payload)

    def list_versions(self, prompt_id: str) -> List[Dict[str, Any]]:
        """List all versions of a prompt"""
        return self._request("GET", f"/prompts/{prompt_id}/versions")

    def publish(self, prompt_id: str, version_id: str, env: str = "prod",
                notes: Optional[str] = None) -> Dict[str, Any]:
        """Publish a version to an environment"""
        payload = {"env": env, "prompt_version_id": version_id}
        if notes is not None:
            payload["notes"] = notes
        return self._request("POST", f"/prompts/{prompt_id}/publish", json=payload)

    def export_bundle(self, prompt_id: str) -> Dict[str, Any]:
        """Download a prompt with all of its versions as a bundle document"""
        return self._request("GET", f"/prompts/{prompt_id}/export")

    def import_bundle(self, bundle: Dict[str, Any], mode: str = "merge") -> Dict[str, Any]:
        """Upload a bundle document; returns the imported prompt"""
        return self._request("POST", "/prompts/import", json={"bundle": bundle, "mode": mode})

    def transfer_prompt(self, prompt_id: str, target: "PromptClient",
                        mode: str = "merge") -> Dict[str, Any]:
        """Copy a prompt from this deployment into another one"""
        bundle = self.export_bundle(prompt_id)
        logger.info(
            f"Transferring prompt {prompt_id} ({len(bundle.get('versions', []))} versions) "
            f"from {self.base_url} to {target.base_url}"
        )
        return target.import_bundle(bundle, mode=mode)


# Example usage
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    staging = PromptClient("http://localhost:8000", actor="release-bot")
    production = PromptClient("http://localhost:9000", actor="release-bot")

    prompt_id = os.environ["PROMPT_ID"]
    active = staging.get_active(prompt_id, env="stage")
    print(f"Active in stage: v{active['version']['version']}")

    imported = staging.transfer_prompt(prompt_id, production)
    print(f"Imported into production with {len(imported['versions'])} versions")
