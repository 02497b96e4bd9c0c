# tools/azure_smoke.py
from __future__ import annotations
from openai import NotFoundError
from offer_core.llm_bridge import azure_client, azure_settings

def main():
    s = azure_settings()
    print("Endpoint :", s.endpoint)
    print("Deploy   :", s.deployment, "(deployment name passed as model=)")
    print("API ver  :", s.api_version)
    cli = azure_client()
    try:
        r = cli.chat.completions.create(
            model=s.deployment,
            messages=[{"role": "user", "content": "Reply with the JSON {\"ok\": true} only."}],
            temperature=0.0,
            max_tokens=10,
        )
        print("Reply    :", r.choices[0].message.content)
    except NotFoundError:
        print("ERROR 404: Azure cannot find this deployment for this API version.")
        print("Check the deployment name and AZURE_OPENAI_API_VERSION against the portal's Target URI.")
        raise

if __name__ == "__main__":
    main()
