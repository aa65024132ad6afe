"""Run the k8s-peer-pool command line tool."""

from k8s_peer_pool.tool.k8s_peer_pool import main

if __name__ == "__main__":
    main()
